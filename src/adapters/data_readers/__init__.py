from adapters.data_readers.loader import install_data_readers, load_data_readers, parse_data_readers
from adapters.data_readers.models import DataReadersFile, ReaderEntry
from adapters.data_readers.operations import install_entries, resolve_target

__all__ = [
    "DataReadersFile",
    "ReaderEntry",
    "install_data_readers",
    "install_entries",
    "load_data_readers",
    "parse_data_readers",
    "resolve_target",
]
