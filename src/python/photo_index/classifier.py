"""
Image classifier interface.

The indexer only needs ranked (label, probability) pairs for a thumbnail.
Implementations raise ClassifierError when a thumbnail cannot be classified.

A classifier is configured by import path, e.g. in config.yaml:

    indexer:
      classifier: my_models.vision:ResNetClassifier
"""

import importlib
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol


@dataclass(frozen=True)
class Label:
    """A classifier label with its probability (0-1)."""
    label: str
    probability: float


class Classifier(Protocol):
    def classify(self, image_path: Path) -> List[Label]:
        """Ranked labels for an image file."""
        ...


class NullClassifier:
    """Classifier that never returns labels; used when no model is configured."""

    def classify(self, image_path: Path) -> List[Label]:
        return []


def load_classifier(import_path: Optional[str]) -> Classifier:
    """
    Instantiate the classifier class named by "package.module:ClassName".

    An empty import path gives a NullClassifier. The class is called
    without arguments.

    Raises:
        ValueError: If the path is malformed or cannot be imported.
    """
    if not import_path:
        return NullClassifier()

    module_name, _, class_name = import_path.partition(":")
    if not module_name or not class_name:
        raise ValueError(f"classifier must look like 'module:ClassName', got {import_path!r}")

    try:
        classifier_class = getattr(importlib.import_module(module_name), class_name)
    except (ImportError, AttributeError) as e:
        raise ValueError(f"cannot load classifier {import_path!r}: {e}") from e

    return classifier_class()
