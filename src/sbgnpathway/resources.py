import json
from importlib import resources
from typing import Any, Dict, List


class ExampleNotFoundError(LookupError):
    pass


def list_examples() -> List[str]:
    data_dir = resources.files(__package__).joinpath("data")
    names = [entry.name for entry in data_dir.iterdir()]
    return sorted(name[: -len(".json")] for name in names if name.endswith(".json"))


def load_example(name: str) -> Dict[str, Any]:
    resource = resources.files(__package__).joinpath(f"data/{name}.json")
    if not resource.is_file():
        raise ExampleNotFoundError(f"unknown example: {name}")
    with resource.open("r", encoding="utf-8") as fh:
        return json.load(fh)
