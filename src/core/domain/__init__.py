"""Dominio: entidades NASA, taxonomía de errores y resultados.

- Modelos Pydantic v2 congelados; el Core nunca muta una entidad devuelta.
- Nada de HTTP ni de CLI aquí: solo fuentes, errores y estados.
"""
