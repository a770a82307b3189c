"""
Exception taxonomy for the warehouse pipeline.

Every exception carries the context needed to diagnose a failed run:
the stage being processed, the source entity, or the offending record.
"""


class PipelineError(Exception):
    """Raised when a pipeline run aborts. Carries the stage being processed."""

    def __init__(self, message: str, stage: str | None = None):
        self.stage = stage
        self.message = message
        prefix = f"[{stage}] " if stage else ""
        super().__init__(f"{prefix}{message}")


class SourceReadFailure(PipelineError):
    """Raised when a source entity cannot be read (unreachable or malformed)."""

    def __init__(self, entity: str, cause: Exception | str, stage: str | None = None):
        self.entity = entity
        self.cause = cause
        super().__init__(f"Failed to read source entity '{entity}': {cause}", stage=stage)


class TransformationFault(PipelineError):
    """
    Raised when a record violates a hard precondition of a transformation.

    Conform stages treat faults as skippable: the record is dropped, logged
    with its identity and counted. Anywhere else a fault aborts the run.
    """

    def __init__(self, message: str, record_id: str | None = None, stage: str | None = None):
        self.record_id = record_id
        detail = f"{message} (record: {record_id})" if record_id else message
        super().__init__(detail, stage=stage)


class QualityViolation(PipelineError):
    """Raised on request when blocking quality rules were violated."""

    def __init__(self, rule_names: list[str]):
        self.rule_names = rule_names
        super().__init__(
            f"{len(rule_names)} blocking quality rule(s) violated: {', '.join(rule_names)}",
            stage="quality_checks",
        )


class PipelineBusyError(PipelineError):
    """Raised when a run is requested while another run holds the run lock."""

    def __init__(self):
        super().__init__("Another pipeline run is in progress", stage="run_lock")
