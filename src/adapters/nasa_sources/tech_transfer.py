"""Fuente: transferencia tecnológica (`/techtransfer/{category}/?{term}`).

Por qué es distinta:
- El término va como clave suelta de la query (`?engine&api_key=...`),
  no como `q=engine`.
- Cada resultado es un array posicional, no un objeto. El mapeo
  índice -> campo es un contrato upstream y vive en UNA tabla
  (`RESULT_FIELDS`): si upstream reordena columnas, se edita una línea.
- El título trae markup (`<span class="highlight">`) que se elimina; la
  descripción conserva su HTML para quien la renderice.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, NamedTuple

from adapters.http_client import strip_markup
from adapters.nasa_sources._base import NasaSourceAdapter, require_list, require_mapping
from core.credentials import CredentialContext
from core.domain.errors import MalformedEnvelopeError
from core.domain.models import TechTransferResult
from core.domain.results import FetchResult
from core.domain.sources import SourceKind, TechTransferCategory
from core.requests import RequestDescriptor, parse_choice, require_text


class PositionalField(NamedTuple):
    index: int
    name: str
    required: bool


RESULT_FIELDS: tuple[PositionalField, ...] = (
    PositionalField(0, "id", True),
    PositionalField(1, "code", True),
    PositionalField(2, "title", True),
    PositionalField(3, "description_html", True),
    PositionalField(5, "category", True),
    PositionalField(9, "center", True),
    PositionalField(10, "image_url", False),
)


@dataclass(frozen=True)
class TechTransferQuery:
    term: str
    category: TechTransferCategory | str = TechTransferCategory.PATENT


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def parse_result_row(row: Any) -> TechTransferResult:
    """Array posicional -> `TechTransferResult` según `RESULT_FIELDS`."""

    cells = require_list(row, what="tech transfer result")
    fields: dict[str, str] = {}
    for column in RESULT_FIELDS:
        if column.index >= len(cells):
            if column.required:
                raise MalformedEnvelopeError(
                    f"tech transfer result has {len(cells)} columns, '{column.name}' is at {column.index}"
                )
            continue
        fields[column.name] = _cell(cells[column.index])

    if not fields["id"].strip():
        raise MalformedEnvelopeError("tech transfer result has an empty id")

    return TechTransferResult(
        id=fields["id"].strip(),
        code=fields["code"].strip(),
        title=strip_markup(fields["title"]),
        description_html=fields["description_html"],
        center=fields["center"].strip(),
        category=fields["category"].strip(),
        image_url=fields.get("image_url", "").strip() or None,
    )


class TechTransferAdapter(NasaSourceAdapter[TechTransferQuery, tuple[TechTransferResult, ...]]):
    source: ClassVar[SourceKind] = SourceKind.TECH_TRANSFER

    def build_request(self, params: TechTransferQuery, credential: CredentialContext) -> RequestDescriptor:
        api_key = credential.require()
        term = require_text(params.term, field="term")
        category = parse_choice(params.category, TechTransferCategory, field="category")
        return RequestDescriptor(
            source=self.source,
            url=f"{self.settings.api_base_url}/techtransfer/{category.value}/",
            params=(("api_key", api_key),),
            bare_query=term,
        )

    def normalize(self, raw: Any, params: TechTransferQuery) -> tuple[TechTransferResult, ...]:
        envelope = require_mapping(raw, what="tech transfer search")
        if "results" not in envelope:
            raise MalformedEnvelopeError("tech transfer response has no 'results' list")
        rows = require_list(envelope["results"], what="tech transfer results")
        return tuple(parse_result_row(row) for row in rows)

    def is_empty(self, value: tuple[TechTransferResult, ...]) -> bool:
        return not value

    async def search(
        self,
        credential: CredentialContext,
        term: str,
        *,
        category: TechTransferCategory | str = TechTransferCategory.PATENT,
    ) -> FetchResult[tuple[TechTransferResult, ...]]:
        return await self._run(TechTransferQuery(term=term, category=category), credential)
