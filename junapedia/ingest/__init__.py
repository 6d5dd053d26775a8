from .csv_loader import decode_csv_bytes, load_csv_directory, row_to_record

__all__ = ["decode_csv_bytes", "load_csv_directory", "row_to_record"]
