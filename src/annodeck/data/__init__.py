from .datasets import group_summary, list_datasets, load_dataset, resolve_data

__all__ = ["group_summary", "list_datasets", "load_dataset", "resolve_data"]
