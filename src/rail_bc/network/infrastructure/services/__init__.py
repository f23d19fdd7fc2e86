from .dataset_loader import DatasetError, DatasetLoader, load_dataset

__all__ = ["DatasetError", "DatasetLoader", "load_dataset"]
