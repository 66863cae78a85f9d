from pathlib import Path
import yaml


class Include:
    """Text kept in a separate file, referenced from a problem file as ``!include name``."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def __repr__(self):
        return f'Include({self.path})'

    def read(self, base_dir: Path) -> str:
        target = (base_dir / self.path).resolve()
        if base_dir.resolve() not in target.parents:
            raise ValueError(f"Included file {self.path} is outside of {base_dir}")
        return target.read_text(encoding='utf-8')


def include_constructor(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> Include:
    return Include(loader.construct_scalar(node))


def get_loader():
    class ProblemLoader(yaml.SafeLoader):
        pass

    ProblemLoader.add_constructor('!include', include_constructor)
    return ProblemLoader
