"""Series loading."""

from tdeelab.data.series_loader import load_series_csv, records_from_frame

__all__ = ["load_series_csv", "records_from_frame"]
