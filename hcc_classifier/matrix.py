"""
Patient by category presence matrix.

A dense ``numpy.int8`` array with a patient index on the rows and the
category catalog on the columns. Rows and columns are addressed by
integer position, so whole-column reads and writes never search.
"""

from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd


class PresenceMatrix:
    """
    Binary patient x category indicator table.

    Attributes:
        patients: pandas Index of patient ids (row labels)
        categories: pandas Index of category ids (column labels, catalog order)
        values: 2-D int8 array of 0/1 indicators
    """

    def __init__(self, patients: Iterable, categories: Sequence[int], values: Optional[np.ndarray] = None):
        self.patients = pd.Index(list(patients), name="patient_id")
        self.categories = pd.Index(list(categories), name="category_id")

        if not self.categories.is_unique:
            raise ValueError("Category ids must be unique")
        if not self.patients.is_unique:
            raise ValueError("Patient ids must be unique")

        shape = (len(self.patients), len(self.categories))
        if values is None:
            values = np.zeros(shape, dtype=np.int8)
        else:
            values = np.asarray(values, dtype=np.int8)
            if values.shape != shape:
                raise ValueError(f"Values shape {values.shape} does not match {shape}")
        self.values = values

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> "PresenceMatrix":
        """Build a matrix from a DataFrame indexed by patient with category columns."""
        return cls(frame.index, [int(c) for c in frame.columns], frame.to_numpy(dtype=np.int8))

    def to_frame(self, prefix: str = "") -> pd.DataFrame:
        """
        Return the matrix as a DataFrame.

        Args:
            prefix: Optional column name prefix, e.g. 'HCC' gives HCC19 columns
        """
        columns = [f"{prefix}{c}" for c in self.categories] if prefix else list(self.categories)
        return pd.DataFrame(self.values.copy(), index=self.patients.copy(), columns=columns)

    def column_position(self, category_id: int) -> int:
        """Integer column position of a category."""
        return self.categories.get_loc(category_id)

    def column(self, category_id: int) -> np.ndarray:
        """View of a category column."""
        return self.values[:, self.column_position(category_id)]

    def get(self, patient_id, category_id: int) -> int:
        """Value of a single cell."""
        return int(self.values[self.patients.get_loc(patient_id), self.column_position(category_id)])

    def row(self, patient_id) -> dict:
        """Category to value mapping for one patient."""
        values = self.values[self.patients.get_loc(patient_id)]
        return {int(c): int(v) for c, v in zip(self.categories, values)}

    def present_count(self) -> int:
        """Number of cells set to 1."""
        return int(self.values.sum(dtype=np.int64))

    def copy(self) -> "PresenceMatrix":
        return PresenceMatrix(self.patients, self.categories, self.values.copy())

    @property
    def shape(self):
        return self.values.shape

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PresenceMatrix):
            return NotImplemented
        return (
            self.patients.equals(other.patients)
            and self.categories.equals(other.categories)
            and np.array_equal(self.values, other.values)
        )

    def __repr__(self) -> str:
        return f"PresenceMatrix(patients={len(self.patients)}, categories={len(self.categories)})"
