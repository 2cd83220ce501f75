"""conciliapagos - Cruce de pagos pendientes con la agenda de proveedores."""

__version__ = "0.1.0"

from conciliapagos.config import ConciliaPagosError, Config, ConfigError, ConfigFileError  # noqa: E402
from conciliapagos.export import NoChequeRecordsError  # noqa: E402
from conciliapagos.io_excel import ExcelFileError, NoRecognizableColumnsError  # noqa: E402

__all__ = [
    "__version__",
    "Config",
    "ConciliaPagosError",
    "ConfigError",
    "ConfigFileError",
    "ExcelFileError",
    "NoChequeRecordsError",
    "NoRecognizableColumnsError",
]
