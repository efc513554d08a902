"""Enrichment orchestrator: backfill missing fields from external sources.

Each record goes through a fixed sequence of steps. A step only writes a
field that is still empty, so local data always wins over fetched data.

1. Profile works without authors are seeded with the owning researcher's
   canonical name; contributor credit names are joined in.
2. Embedded citation text is parsed for authors, reference and DOI.
3. Author names are normalized.
4. DOI known but authors or abstract missing: citation-metadata lookup.
5. Non-preprint record still missing DOI, abstract, reference or archive
   id: archive search by title and first author. A non-preprint record
   with an archive id but no abstract or authors gets the archive entry.
6. Still missing DOI or reference: citation-metadata search by title and
   surname, accepted only above the title-overlap threshold.
7. Contributors: tracked researchers plus researchers named in authors.
8. Reference standardized, or inferred from the DOI lookup.
9. Archive id looked up by DOI when missing, then its entry fetched as in
   step 5; links recomputed.
10. Transient provenance dropped.
"""

from collections.abc import Sequence
from typing import Any

from pubreconcile.adapters.citation import candidate_record, infer_citation_ref
from pubreconcile.adapters.preprint import preprint_record
from pubreconcile.audit.logger import AuditLogger
from pubreconcile.config import ReconcileConfig
from pubreconcile.enrich.scheduling import RequestScheduler
from pubreconcile.enrich.services import EnrichmentServices
from pubreconcile.enrich.similarity import best_candidate
from pubreconcile.merge.survivor import has_primary_source_id
from pubreconcile.models.records import PublicationRecord, SourceOrigin
from pubreconcile.models.sources import CitationMetadata
from pubreconcile.normalize.identifiers import (
    ARXIV_SCHEME,
    build_derived_links,
    normalize_native_id,
    normalize_persistent_id,
)
from pubreconcile.normalize.names import (
    NameNormalizer,
    join_authors,
    researchers_named_in,
    split_authors,
)
from pubreconcile.normalize.references import ReferenceStandardizer
from pubreconcile.parse.citation import parse_citation

__all__ = ["Enricher"]

_TRACKED_FIELDS = ("persistent_id", "native_id", "authors_raw", "abstract_text", "citation_ref")


def _snapshot(record: PublicationRecord) -> dict[str, Any]:
    return {name: getattr(record, name) for name in _TRACKED_FIELDS}


def _backfill(record: PublicationRecord, found: PublicationRecord, fields: Sequence[str]) -> None:
    for name in fields:
        if getattr(record, name) or not getattr(found, name):
            continue
        if name == "native_id":
            record.native_id = found.native_id
            record.native_scheme = found.native_scheme
        elif name == "categories":
            record.categories = list(found.categories)
        else:
            setattr(record, name, getattr(found, name))


class _PointLookup:
    """Per-record cache of citation-metadata point lookups."""

    def __init__(self, enricher: "Enricher", rid: str) -> None:
        self._enricher = enricher
        self._rid = rid
        self._results: dict[str, CitationMetadata | None] = {}

    async def get(self, persistent_id: str) -> CitationMetadata | None:
        if persistent_id not in self._results:
            source = self._enricher.services.citation_source
            result = None
            if source is not None:
                result = await self._enricher.scheduler.call(
                    _service_name(source),
                    "lookup_by_id",
                    source.lookup_by_id,
                    persistent_id,
                    rid=self._rid,
                )
            self._results[persistent_id] = result
        return self._results[persistent_id]


def _service_name(service: object) -> str:
    return getattr(service, "name", None) or type(service).__name__


class Enricher:
    """Backfill missing record fields from external collaborators.

    Parameters
    ----------
    config : ReconcileConfig
        Run configuration (roster, name variants, reference tables).
    services : EnrichmentServices | None, optional
        External collaborators. None means an offline run.
    scheduler : RequestScheduler | None, optional
        Call scheduler. Defaults to a scheduler with default policy.
    logger : AuditLogger | None, optional
        Audit logger.
    """

    def __init__(
        self,
        config: ReconcileConfig,
        services: EnrichmentServices | None = None,
        scheduler: RequestScheduler | None = None,
        logger: AuditLogger | None = None,
    ) -> None:
        self.config = config
        self.services = services or EnrichmentServices()
        self.scheduler = scheduler or RequestScheduler(logger=logger)
        self.logger = logger
        self.names = NameNormalizer(config.variant_map)
        self.references = ReferenceStandardizer(
            config.journal_abbreviations, config.normalization_patterns
        )

    async def enrich_all(self, records: Sequence[PublicationRecord]) -> list[PublicationRecord]:
        """Enrich every record with bounded concurrency, keeping input order."""
        return await self.scheduler.map_ordered(self.enrich, records)

    async def enrich(self, record: PublicationRecord) -> PublicationRecord:
        """Run all enrichment steps on one record, in place.

        Parameters
        ----------
        record : PublicationRecord
            Record to enrich.

        Returns
        -------
        PublicationRecord
            The same record, with empty fields backfilled where possible and
            the transient payload removed.
        """
        rid = record.label
        before = _snapshot(record)
        lookup = _PointLookup(self, rid)

        self._seed_authors(record)
        self._apply_citation_text(record)
        record.authors_raw = self.names.normalize(record.authors_raw)
        await self._fill_from_point_lookup(record, lookup)
        await self._search_preprint(record, rid)
        await self._fetch_archive_entry(record, rid)
        await self._search_citations(record, rid)
        self._tag_contributors(record)
        await self._settle_citation_ref(record, lookup)
        if await self._find_preprint_by_pid(record, rid):
            await self._fetch_archive_entry(record, rid, standardize=True)
            self._tag_contributors(record)
        record.derived_links = build_derived_links(
            record.persistent_id, record.native_id, record.native_scheme
        )
        record.transient = None

        if self.logger:
            after = _snapshot(record)
            filled = [name for name in _TRACKED_FIELDS if not before[name] and after[name]]
            self.logger.event(
                "record_enriched",
                data={"filled": filled},
                level="DEBUG",
                rid=rid,
            )
        return record

    # ------------------------------------------------------------------
    # Local steps
    # ------------------------------------------------------------------

    def _seed_authors(self, record: PublicationRecord) -> None:
        transient = record.transient
        if record.source_origin is not SourceOrigin.PROFILE or transient is None:
            return

        if not record.has_authors and transient.profile_owner_id:
            owner = self.config.researcher(transient.profile_owner_id)
            if owner is not None:
                record.authors_raw = owner.name

        if transient.contributors:
            names = split_authors(record.authors_raw) + list(transient.contributors)
            record.authors_raw = join_authors(dict.fromkeys(names))

    def _apply_citation_text(self, record: PublicationRecord) -> None:
        transient = record.transient
        if transient is None or not transient.citation_value:
            return

        fields = parse_citation(transient.citation_value, transient.citation_format)
        if fields.authors and not record.has_authors:
            record.authors_raw = fields.authors
        if fields.citation_ref and not record.has_citation_ref:
            record.citation_ref = fields.citation_ref
        if fields.persistent_id and not record.persistent_id:
            record.persistent_id = fields.persistent_id

    def _tag_contributors(self, record: PublicationRecord) -> None:
        record.authors_raw = self.names.normalize(record.authors_raw)
        record.contributing_researcher_ids |= researchers_named_in(
            record.authors_raw, self.config.roster
        )

    # ------------------------------------------------------------------
    # Lookup steps
    # ------------------------------------------------------------------

    async def _fill_from_point_lookup(
        self, record: PublicationRecord, lookup: _PointLookup
    ) -> None:
        if not record.persistent_id:
            return
        if record.has_authors and record.has_abstract:
            return

        metadata = await lookup.get(record.persistent_id)
        if metadata is None:
            return
        if metadata.authors and not record.has_authors:
            record.authors_raw = metadata.authors
        if metadata.abstract and not record.has_abstract:
            record.abstract_text = metadata.abstract

    async def _search_preprint(self, record: PublicationRecord, rid: str) -> None:
        source = self.services.preprint_source
        if source is None or record.source_origin is SourceOrigin.PREPRINT:
            return
        needs = (
            not record.persistent_id
            or not record.has_abstract
            or not record.has_citation_ref
            or not has_primary_source_id(record)
        )
        first_author = record.first_author
        if not needs or not first_author:
            return

        entry = await self.scheduler.call(
            _service_name(source),
            "search_by_title_author",
            source.search_by_title_author,
            record.title,
            first_author,
            rid=rid,
        )
        found = preprint_record(entry) if entry is not None else None
        if found is None:
            return
        _backfill(
            record,
            found,
            ("persistent_id", "abstract_text", "authors_raw", "categories", "native_id"),
        )

    async def _fetch_archive_entry(
        self, record: PublicationRecord, rid: str, standardize: bool = False
    ) -> None:
        source = self.services.preprint_source
        if source is None or record.source_origin is SourceOrigin.PREPRINT:
            return
        if not has_primary_source_id(record):
            return
        if record.has_abstract and record.has_authors:
            return

        entry = await self.scheduler.call(
            _service_name(source),
            "fetch_by_native_id",
            source.fetch_by_native_id,
            record.native_id,
            rid=rid,
        )
        found = preprint_record(entry) if entry is not None else None
        if found is None:
            return

        had_reference = record.has_citation_ref
        _backfill(record, found, ("abstract_text", "authors_raw", "categories", "citation_ref"))
        record.authors_raw = self.names.normalize(record.authors_raw)
        # Step 8 has already run for references fetched after it
        if standardize and not had_reference and record.has_citation_ref:
            record.citation_ref = self.references.standardize(record.citation_ref)

    async def _search_citations(self, record: PublicationRecord, rid: str) -> None:
        source = self.services.citation_source
        if source is None:
            return
        if record.persistent_id and record.has_citation_ref:
            return
        first_author = record.first_author
        if not first_author:
            return
        surname = first_author.split()[-1]

        candidates = await self.scheduler.call(
            _service_name(source),
            "search_by_title_author",
            source.search_by_title_author,
            record.title,
            surname,
            rid=rid,
        )
        if not candidates:
            return

        match, score = best_candidate(
            record.title, candidates, threshold=self.config.title_match_threshold
        )
        found = candidate_record(match) if match is not None else None
        if found is None:
            return
        if self.logger:
            self.logger.event(
                "citation_candidate_accepted",
                data={"score": round(score, 4), "candidate_title": match.title},
                level="DEBUG",
                rid=rid,
            )
        _backfill(
            record,
            found,
            ("persistent_id", "abstract_text", "authors_raw", "citation_ref"),
        )

    async def _settle_citation_ref(self, record: PublicationRecord, lookup: _PointLookup) -> None:
        if record.has_citation_ref:
            record.citation_ref = self.references.standardize(record.citation_ref)
            return
        if not record.persistent_id:
            return

        metadata = await lookup.get(record.persistent_id)
        if metadata is None:
            return
        isbn = record.transient.external_id("isbn") if record.transient else None
        inferred = infer_citation_ref(metadata, isbn)
        if inferred:
            record.citation_ref = inferred

    async def _find_preprint_by_pid(self, record: PublicationRecord, rid: str) -> bool:
        source = self.services.preprint_source
        if source is None or record.native_id or not record.persistent_id:
            return False

        accession = await self.scheduler.call(
            _service_name(source),
            "find_by_persistent_id",
            source.find_by_persistent_id,
            normalize_persistent_id(record.persistent_id) or record.persistent_id,
            rid=rid,
        )
        native_id = normalize_native_id(accession)
        if not native_id:
            return False
        record.native_id = native_id
        record.native_scheme = ARXIV_SCHEME
        return True
