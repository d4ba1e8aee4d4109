from pathlib import Path

import setip


def get_top_level_dir() -> Path:
    """Return the absolute path to the top setip project directory

    @return Path('<top-setip-dir>')
    """
    return Path(setip.__file__).parent.parent.resolve()


def setip_project_dir(sub_path: str) -> str:
    """Get a path within the setip project directory

    @return str of the combined path

    Example: setip_project_dir("my/path") -> "/path/to/setip/my/path"
    """
    return str(get_top_level_dir() / sub_path)
