from __future__ import annotations

from pathlib import Path
from typing import Any, Union

ASSET_RELATIVE_PATH = Path("images") / "slime_sheet.txt"


class AssetLoadError(RuntimeError):
    """スプライトシートを読み込めなかった"""


def default_sprite_sheet() -> Path:
    # パッケージデータとして同梱（pip install 後もモジュールの隣にある）
    return Path(__file__).resolve().parent / ASSET_RELATIVE_PATH


def read_hex_rows(path: Path) -> list[str]:
    """1 文字 = 1 ピクセル（パレット番号の 16 進数）のテキスト画像を読む"""
    rows = [ln.strip() for ln in path.read_text(encoding="utf-8").splitlines()]
    rows = [r for r in rows if r and not r.startswith("#")]
    if not rows:
        raise AssetLoadError(f"empty sprite sheet: {path}")
    width = len(rows[0])
    for i, row in enumerate(rows):
        if len(row) != width:
            raise AssetLoadError(f"{path}: row {i} has {len(row)} pixels, expected {width}")
        try:
            int(row, 16)
        except ValueError as exc:
            raise AssetLoadError(f"{path}: row {i} is not hex") from exc
    return rows


def load_sprite_sheet(px: Any, path: Union[str, Path], bank: int = 0) -> None:
    """スプライトシートをイメージバンクに読み込む。

    ``.png`` などの画像ファイルは ``Image.load``、``.txt`` は 16 進の行データとして
    ``Image.set`` で書き込む。失敗した場合は AssetLoadError を送出する。
    """
    path = Path(path)
    if not path.exists():
        raise AssetLoadError(f"could not load sprite sheet: {path} not found")
    try:
        image = px.images[bank]
        if path.suffix.lower() == ".txt":
            image.set(0, 0, read_hex_rows(path))
        else:
            image.load(0, 0, str(path))
    except AssetLoadError:
        raise
    except Exception as exc:
        raise AssetLoadError(f"could not load sprite sheet: {path}: {exc}") from exc
