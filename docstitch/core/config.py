# docstitch/core/config.py
"""
Processor Configuration

Settings shared by DocumentProcessor and the format handlers, with presets:

    ProcessorConfig.default()           HTML tables, fail fast
    ProcessorConfig.rag_optimized()     HTML tables, failures become results
    ProcessorConfig.high_performance()  Markdown tables, 50 MB limit
"""
from dataclasses import dataclass
from enum import Enum


class ErrorHandlingStrategy(Enum):
    """What DocumentProcessor.parse() does when a conversion fails."""
    FAIL_FAST = "fail_fast"
    LOG_AND_CONTINUE = "log_and_continue"


@dataclass(frozen=True)
class ProcessorConfig:
    """
    Conversion settings.

    Attributes:
        enable_table_extraction: Also return the rendered tables as a
            separate list (content always keeps its tables)
        table_as_html: Render tables as HTML (Markdown otherwise)
        max_document_size_mb: Largest accepted input file
        error_handling_strategy: FAIL_FAST re-raises, LOG_AND_CONTINUE
            returns a failed DocumentResult
        verbose_logging: Log per-document progress at INFO level
    """
    enable_table_extraction: bool = True
    table_as_html: bool = True
    max_document_size_mb: int = 100
    error_handling_strategy: ErrorHandlingStrategy = ErrorHandlingStrategy.FAIL_FAST
    verbose_logging: bool = True

    @classmethod
    def default(cls) -> "ProcessorConfig":
        return cls()

    @classmethod
    def rag_optimized(cls) -> "ProcessorConfig":
        return cls(
            enable_table_extraction=True,
            table_as_html=True,
            error_handling_strategy=ErrorHandlingStrategy.LOG_AND_CONTINUE,
        )

    @classmethod
    def high_performance(cls) -> "ProcessorConfig":
        return cls(
            enable_table_extraction=True,
            table_as_html=False,
            max_document_size_mb=50,
            error_handling_strategy=ErrorHandlingStrategy.LOG_AND_CONTINUE,
            verbose_logging=False,
        )

    @property
    def max_document_size_bytes(self) -> int:
        return self.max_document_size_mb * 1024 * 1024

    def validate(self) -> None:
        """Raise ValueError for settings no conversion can run with."""
        if self.max_document_size_mb <= 0:
            raise ValueError("max_document_size_mb must be positive")
        if not isinstance(self.error_handling_strategy, ErrorHandlingStrategy):
            raise ValueError(f"Unknown error handling strategy: {self.error_handling_strategy!r}")


__all__ = ["ErrorHandlingStrategy", "ProcessorConfig"]
