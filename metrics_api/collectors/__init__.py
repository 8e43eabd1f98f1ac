from .conntrack import parse_connection_line, read_connection_metric
from .cpu import read_cpu_metric
from .memory import read_memory_metric
from .network import read_network_metric
from .paths import ProcfsPaths
from .reader import FsReader, TextSource
from .runner import CommandError, CommandRunner, ProcessRunner
from .static_network import read_static_network_metric
from .storage import read_storage_metric
from .system import read_static_system_metric, read_system_metric
from .units import calculate_cpu_usage, calculate_rate, convert_bytes, counter_rate

__all__ = [
    "parse_connection_line",
    "read_connection_metric",
    "read_cpu_metric",
    "read_memory_metric",
    "read_network_metric",
    "ProcfsPaths",
    "FsReader",
    "TextSource",
    "CommandError",
    "CommandRunner",
    "ProcessRunner",
    "read_static_network_metric",
    "read_storage_metric",
    "read_static_system_metric",
    "read_system_metric",
    "calculate_cpu_usage",
    "calculate_rate",
    "convert_bytes",
    "counter_rate",
]
