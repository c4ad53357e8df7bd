from __future__ import annotations

from rt.test.architecture._gate import require_arch_checks_enabled
from rt.test.architecture._utils import iter_source_files, matches_prefix, parse_imports, rt_root


def test_direct_rich_imports_are_limited_to_the_console() -> None:
    require_arch_checks_enabled()

    root = rt_root()
    allowlist = {"output/console.py"}

    offenders: list[str] = []
    for file_path in iter_source_files(root):
        rel = file_path.relative_to(root).as_posix()
        if rel in allowlist:
            continue
        for item in parse_imports(file_path):
            if matches_prefix(item.module, "rich"):
                offenders.append(f"{rel}:{item.line}: direct rich import '{item.module}'")

    assert not offenders, "Direct rich usage policy violations:\n" + "\n".join(offenders)
