"""
Table Export - OutputTable to CSV.

Writes the table with pandas: header row, no index column, NO_DATA and
NaN written as the configured missing-value marker ("NA" by default).

Exports:
    export_table: Write an OutputTable to CSV
"""

from pathlib import Path
from typing import Optional, Union

from gridzonal.config import AppConfig, get_config
from gridzonal.core.models.results import OutputTable
from gridzonal.util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "table_export")


def export_table(
    table: OutputTable,
    path: Optional[Union[str, Path]],
    include_id: bool = False,
    config: Optional[AppConfig] = None
) -> Optional[Path]:
    """
    Write `table` to `path` as CSV.

    Args:
        table: Extraction result
        path: Destination file; None skips the export
        include_id: Prepend a region_id column
        config: AppConfig (default: get_config())

    Returns:
        Path written, or None when path is None
    """
    if path is None:
        return None

    config = config or get_config()
    path = Path(path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)

    frame = table.to_dataframe(include_id=include_id)
    frame.to_csv(path, index=False, na_rep=config.loader.export_na_rep)
    logger.info(f"✅ Wrote {len(frame)} rows to {path}")
    return path
