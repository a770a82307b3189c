"""
Batch pipeline orchestration.

Coordinates the flow of one full-refresh run:
extract -> conform -> check conformed layer -> assemble -> check
dimensional layer -> commit
"""

import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime, timezone

from src.config import PipelineConfig
from src.core.assembly import build_customer_dimension, build_product_dimension, build_sales_facts
from src.core.errors import PipelineBusyError
from src.core.models import RawRecord, RunResult, ValidationReport
from src.core.rules import RuleConfigLoader, RuleEngine
from src.core.transforms import FieldNormalizer, RecordConformer, VocabularyLoader
from src.core.transforms.conform import ENTITY_SOURCE_SYSTEMS
from src.observability import metrics
from src.observability.logger import get_logger, log_operation
from src.warehouse import TargetStore, UnitOfWork, load_scope

from .readers import ENTITIES, SourceProvider

logger = get_logger(__name__)

QUALITY_LAYERS = ("conformed", "dimensional")
MAX_LOGGED_IDENTIFIERS = 10


class WarehousePipeline:
    """
    Orchestrates a full-refresh warehouse run.

    Flow:
    1. Extract every source entity
    2. Conform each entity (skippable record faults are dropped and counted)
    3. Evaluate the conformed-layer quality rules
    4. Assemble dimensions and facts
    5. Evaluate the dimensional-layer quality rules
    6. Commit all tables in one unit of work

    Any abort discards the staged tables; the store keeps its previous
    state. Only one run may be active per pipeline at a time.
    """

    def __init__(
        self,
        source: SourceProvider,
        store: TargetStore,
        rule_engine: RuleEngine,
        normalizer: FieldNormalizer,
        as_of: date | None = None
    ):
        """
        Initialize the pipeline.

        Args:
            source: Provider of raw source rows
            store: Target store receiving committed tables
            rule_engine: Quality rules evaluated after conform and assembly
            normalizer: Vocabularies used to normalize coded values
            as_of: Reference date for "future" checks (defaults to today)
        """
        self.source = source
        self.store = store
        self.rule_engine = rule_engine
        self.normalizer = normalizer
        self.conformer = RecordConformer(normalizer, as_of=as_of)
        self._run_lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: PipelineConfig,
        source: SourceProvider,
        store: TargetStore
    ) -> "WarehousePipeline":
        """Build a pipeline with the vocabularies and rules named by the config."""
        normalizer = VocabularyLoader(config.vocabularies_path).load()
        rules = RuleConfigLoader(config.quality_rules_path).load_rules()
        return cls(source, store, RuleEngine(rules, normalizer=normalizer), normalizer)

    @contextmanager
    def _stage(self, name: str, result: RunResult) -> Iterator[None]:
        """Time a stage into the run result and remember it if it fails."""
        operation = log_operation(name, logger=logger, run_id=result.run_id, stage=name)
        try:
            with operation:
                yield
        except Exception:
            result.failed_stage = name
            raise
        finally:
            result.record_duration(name, operation.duration or 0.0)

    def run_pipeline(self, run_id: str | None = None) -> RunResult:
        """
        Execute one full-refresh run.

        Returns:
            RunResult with status "success", "quality_failed" (blocking
            rules violated, tables committed) or "failed" (aborted, nothing
            committed)

        Raises:
            PipelineBusyError: If another run of this pipeline is in progress
        """
        if not self._run_lock.acquire(blocking=False):
            raise PipelineBusyError()

        result = RunResult(run_id=run_id or uuid.uuid4().hex[:12])
        logger.info("Starting pipeline run", extra={"run_id": result.run_id})

        try:
            with UnitOfWork(self.store) as uow:
                raw = self._extract(result)
                conformed = self._conform(raw, result, uow)
                conformed_report = self._check(conformed, "conformed", result)
                dimensional = self._assemble(conformed, result, uow)
                dimensional_report = self._check(dimensional, "dimensional", result)
                result.quality_report = conformed_report.merge(dimensional_report, scope="all")

                with self._stage("load", result):
                    for target, count in uow.commit().items():
                        result.record_rows(target, count)

            result.status = "quality_failed" if result.quality_report.has_blocking_violations else "success"
            logger.info(
                f"Pipeline run finished: {result.status}",
                extra={
                    "run_id": result.run_id,
                    "status": result.status,
                    "rows_per_target": result.rows_per_target,
                    "dropped_records": result.dropped_records,
                    "duration_seconds": result.total_duration,
                }
            )
        except Exception as e:
            result.status = "failed"
            result.error = str(e)
            logger.error(
                "Pipeline run failed; staged tables discarded",
                extra={"run_id": result.run_id, "failed_stage": result.failed_stage},
                exc_info=True
            )
        finally:
            result.finished_at = datetime.now(timezone.utc)
            metrics.record_run(result)
            self._run_lock.release()

        return result

    def _extract(self, result: RunResult) -> dict[str, list[RawRecord]]:
        raw = {}
        for entity in ENTITIES:
            with self._stage(f"extract:{entity}", result):
                source_system = ENTITY_SOURCE_SYSTEMS[entity]
                raw[entity] = [
                    RawRecord(entity=entity, source_system=source_system, fields=row)
                    for row in self.source.read_all(entity)
                ]
        return raw

    def _conform(
        self,
        raw: dict[str, list[RawRecord]],
        result: RunResult,
        uow: UnitOfWork
    ) -> dict[str, list]:
        conformed = {}
        for entity, rows in raw.items():
            stage = f"conform:{entity}"
            with self._stage(stage, result):
                for field, unmapped in self.conformer.vocabulary_drift(entity, rows).items():
                    logger.warning(
                        f"Unrecognized {field} codes mapped to '{self.normalizer.sentinel}'",
                        extra={"run_id": result.run_id, "entity": entity, "unmapped": dict(unmapped)}
                    )

                outcome = self.conformer.conform(entity, rows)
                for fault in outcome.faults:
                    logger.warning(
                        f"Dropped record: {fault.message}",
                        extra={"run_id": result.run_id, "stage": stage, "record_id": fault.record_id}
                    )
                if outcome.null_keys_dropped or outcome.duplicates_dropped:
                    logger.info(
                        f"Deduplicated {entity}",
                        extra={
                            "run_id": result.run_id,
                            "null_keys_dropped": outcome.null_keys_dropped,
                            "duplicates_dropped": outcome.duplicates_dropped,
                        }
                    )

                result.record_dropped(stage, outcome.dropped)
                conformed[entity] = outcome.records
                uow.stage(entity, outcome.records)
        return conformed

    def _assemble(self, conformed: dict[str, list], result: RunResult, uow: UnitOfWork) -> dict[str, list]:
        with self._stage("assemble:dim_customers", result):
            dim_customers = build_customer_dimension(
                conformed["customers"], conformed["erp_customers"], conformed["erp_locations"]
            )
        with self._stage("assemble:dim_products", result):
            dim_products = build_product_dimension(conformed["products"], conformed["erp_categories"])
        with self._stage("assemble:fact_sales", result):
            fact_sales = build_sales_facts(conformed["sales_lines"], dim_customers, dim_products)

        dimensional = {
            "dim_customers": dim_customers,
            "dim_products": dim_products,
            "fact_sales": fact_sales,
        }
        for target, rows in dimensional.items():
            uow.stage(target, rows)
        return dimensional

    def _check(self, datasets: dict[str, list], layer: str, result: RunResult) -> ValidationReport:
        with self._stage(f"quality_checks:{layer}", result):
            report = self.rule_engine.evaluate(datasets, layer=layer)
        self._log_report(report, result.run_id)
        return report

    def _log_report(self, report: ValidationReport, run_id: str | None = None) -> None:
        for outcome in report.violations:
            log = logger.warning if outcome.severity == "blocking" else logger.info
            log(
                f"Quality rule violated: {outcome.rule_name}",
                extra={
                    "run_id": run_id,
                    "rule_name": outcome.rule_name,
                    "dataset": outcome.dataset,
                    "severity": outcome.severity,
                    "violations": outcome.count,
                    "sample_record_ids": outcome.violating_record_identifiers[:MAX_LOGGED_IDENTIFIERS],
                }
            )

    def run_quality_checks(self, scope: str = "all") -> ValidationReport:
        """
        Evaluate quality rules against the committed tables.

        Args:
            scope: "conformed", "dimensional" or "all"

        Returns:
            ValidationReport for the scope

        Raises:
            ValueError: If the scope is unknown
        """
        layers = QUALITY_LAYERS if scope == "all" else (scope,)
        if any(layer not in QUALITY_LAYERS for layer in layers):
            raise ValueError(f"Unknown scope '{scope}'. Expected conformed, dimensional or all")

        report = ValidationReport(scope=scope)
        for layer in layers:
            with log_operation(f"quality_checks:{layer}", logger=logger, stage=layer):
                layer_report = self.rule_engine.evaluate(load_scope(self.store, layer), layer=layer)
            report = report.merge(layer_report, scope=scope)

        self._log_report(report)
        metrics.record_quality_report(report)
        return report
