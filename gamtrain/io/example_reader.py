# gamtrain/io/example_reader.py
from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

import pyarrow as pa
import pyarrow.parquet as pq
import pyarrow.types as pat

from gamtrain.core.feature_vector import FeatureVector
from gamtrain.utils.errors import UserInputError
from gamtrain.utils.logger import logs


def split_column(column: str) -> Tuple[str, str]:
    """'family.name' -> (family, name); a bare column is its own family."""
    family, sep, name = column.partition(".")
    return (family, name) if sep else (column, column)


def table_to_examples(table: pa.Table) -> List[FeatureVector]:
    """
    Column layout (one row = one example, nulls = absent features):

    - numeric            'family.name' -> float feature
    - string             'family[.x]'  -> string feature, the cell is the value
    - list<string>       'family[.x]'  -> several string features
    - list<numeric>      'family.name' -> dense feature
    """
    examples = [FeatureVector() for _ in range(table.num_rows)]

    for column, field in zip(table.column_names, table.schema):
        family, name = split_column(column)
        values = table.column(column).to_pylist()
        kind = field.type

        if pat.is_integer(kind) or pat.is_floating(kind) or pat.is_boolean(kind):
            for fv, v in zip(examples, values):
                if v is not None:
                    fv.float_features.setdefault(family, {})[name] = float(v)

        elif pat.is_string(kind) or pat.is_large_string(kind):
            for fv, v in zip(examples, values):
                if v is not None:
                    fv.string_features.setdefault(family, set()).add(v)

        elif pat.is_list(kind) or pat.is_large_list(kind):
            inner = kind.value_type
            if pat.is_string(inner) or pat.is_large_string(inner):
                for fv, v in zip(examples, values):
                    if v:
                        fv.string_features.setdefault(family, set()).update(
                            s for s in v if s is not None
                        )
            else:
                for fv, v in zip(examples, values):
                    if v is not None:
                        fv.dense_features.setdefault(family, {})[name] = [float(x) for x in v]

        else:
            logs.warning(f"[ExampleReader] unsupported column type {kind} for '{column}', skipped")

    return examples


def read_examples(path: Path | str) -> List[FeatureVector]:
    path = Path(path)
    if not path.exists():
        raise UserInputError(f"data file not found: {path}")

    table = pq.read_table(path)
    examples = table_to_examples(table)
    logs.info(f"[ExampleReader] {path.name}: rows={len(examples)} columns={table.num_columns}")
    return examples
