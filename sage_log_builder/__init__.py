"""Monthly EAS RWT/RMT compliance logs from Sage ENDEC exports."""
from .core import AppConfig, EmptyLogError, assemble, load_config, read_log_records
from .entries import Direction, LogEntry, RequiredTest, SourceLabels, classify

__version__ = "0.1.0"
