"""Resizing of images referenced from content, with cached, hash-named outputs."""

from __future__ import annotations

import hashlib
import math
import os
import re
import struct
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from os import PathLike
from pathlib import Path

from PIL import Image

from siteforge.errors import Error, chain

RESIZED_SUBDIR = "processed_images"

# Kept in sync with Processor._op_filename and Format.extension.
RESIZED_FILENAME = re.compile(r"([0-9a-f]{16})([0-9a-f]{2})[.](jpg|png)")

_RESIZE_FILTER = Image.Resampling.LANCZOS
_RATIO_EPSILON = 0.1
_U32_MAX = 0xFFFFFFFF


class ResizeKind(IntEnum):
    """The precise kind of a resize operation."""

    SCALE = 1
    """Scale to exact dimensions, ignoring aspect ratio."""
    FIT_WIDTH = 2
    """Scale to a width, keeping aspect ratio."""
    FIT_HEIGHT = 3
    """Scale to a height, keeping aspect ratio."""
    FIT = 4
    """Scale to fit inside a box, keeping aspect ratio."""
    FILL = 5
    """Scale and crop to exactly fill a box."""


_KIND_BY_NAME = {
    "scale": ResizeKind.SCALE,
    "fit_width": ResizeKind.FIT_WIDTH,
    "fit_height": ResizeKind.FIT_HEIGHT,
    "fit": ResizeKind.FIT,
    "fill": ResizeKind.FILL,
}


@dataclass(frozen=True)
class ResizeOp:
    """A resize operation with the dimensions it needs."""

    kind: ResizeKind
    width: int | None = None
    height: int | None = None

    @classmethod
    def from_args(cls, op: str, width: int | None, height: int | None) -> ResizeOp:
        """Build an operation from its name and the given dimensions."""
        if op == "fit_width":
            if width is None:
                raise Error('op="fit_width" requires a `width` argument')
            return cls(ResizeKind.FIT_WIDTH, width=width)
        if op == "fit_height":
            if height is None:
                raise Error('op="fit_height" requires a `height` argument')
            return cls(ResizeKind.FIT_HEIGHT, height=height)
        if op in ("scale", "fit", "fill"):
            if width is None or height is None:
                raise Error(f"op={op} requires a `width` and `height` argument")
            return cls(_KIND_BY_NAME[op], width=width, height=height)
        raise Error(f"Invalid image resize operation: {op}")

    def _digest_bytes(self) -> bytes:
        data = bytes([int(self.kind)])
        if self.width is not None:
            data += struct.pack("<I", self.width)
        if self.height is not None:
            data += struct.pack("<I", self.height)
        return data


class FormatKind(Enum):
    """Output image encodings."""

    JPEG = "jpg"
    PNG = "png"


@dataclass(frozen=True)
class Format:
    """Output format of a processed image; JPEG carries a quality in percent."""

    kind: FormatKind
    quality: int | None = None

    @classmethod
    def from_args(cls, source: str, format: str, quality: int) -> Format:
        """Choose the output format, ``auto`` deciding from the source extension."""
        if not 0 < quality <= 100:
            raise ValueError("Jpeg quality must be within the range [1; 100]")
        if format == "auto":
            lossy = cls.is_lossy(source)
            if lossy is None:
                raise Error(f"Unsupported image file: {source}")
            return cls(FormatKind.JPEG, quality) if lossy else cls(FormatKind.PNG)
        if format in ("jpeg", "jpg"):
            return cls(FormatKind.JPEG, quality)
        if format == "png":
            return cls(FormatKind.PNG)
        raise Error(f"Invalid image format: {format}")

    @staticmethod
    def is_lossy(path: str | PathLike[str]) -> bool | None:
        """Whether a supported image file is lossy; ``None`` if unsupported."""
        suffix = Path(path).suffix
        if not suffix:
            return None
        extension = suffix[1:].lower()
        if extension in ("jpg", "jpeg"):
            return True
        if extension in ("png", "gif", "bmp"):
            return False
        return None

    @property
    def extension(self) -> str:
        """The file extension of outputs in this format."""
        return self.kind.value

    def _digest_bytes(self) -> bytes:
        return bytes([self.quality if self.kind is FormatKind.JPEG else 0])


def _op_hash(source: str, op: ResizeOp, fmt: Format) -> int:
    digest = hashlib.blake2b(digest_size=8)
    digest.update(source.encode("utf-8"))
    digest.update(op._digest_bytes())
    digest.update(fmt._digest_bytes())
    return int.from_bytes(digest.digest(), "big")


def _file_stale(source: Path, target: Path) -> bool:
    """A target is stale when it is missing or older than its source."""
    if not target.exists():
        return True
    try:
        return source.stat().st_mtime > target.stat().st_mtime
    except OSError:
        return True


def _round(value: float) -> int:
    return math.floor(value + 0.5)


def _fit_dimensions(width: int, height: int, box_w: int, box_h: int) -> tuple[int, int]:
    """Largest size with the image's aspect ratio that fits inside the box."""
    use_width = box_w * height <= width * box_h
    if use_width:
        return box_w, max(1, height * box_w // width)
    return max(1, width * box_h // height), box_h


@dataclass(eq=False)
class ImageOp:
    """All the data needed to perform one resize operation."""

    source: str
    op: ResizeOp
    format: Format
    hash: int = field(init=False)
    collision_id: int = field(default=0, init=False)
    """Non-zero when another operation shares this hash."""

    def __post_init__(self) -> None:
        self.hash = _op_hash(self.source, self.op, self.format)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ImageOp):
            return NotImplemented
        return (self.source, self.op, self.format, self.hash) == (
            other.source,
            other.op,
            other.format,
            other.hash,
        )

    @classmethod
    def from_args(
        cls,
        source: str,
        op: str,
        width: int | None,
        height: int | None,
        format: str,
        quality: int,
    ) -> ImageOp:
        """Build an operation from template-style arguments."""
        resize = ResizeOp.from_args(op, width, height)
        fmt = Format.from_args(source, format, quality)
        return cls(source, resize, fmt)

    def perform(
        self, content_path: str | PathLike[str], target_path: str | PathLike[str]
    ) -> None:
        """Resize the source image into ``target_path`` unless it is up to date."""
        src_path = Path(content_path) / self.source
        target = Path(target_path)
        if not _file_stale(src_path, target):
            return
        try:
            with Image.open(src_path) as opened:
                opened.load()
                result = self._resize(opened)
            if self.format.kind is FormatKind.PNG:
                result.save(target, format="PNG")
            else:
                if result.mode not in ("RGB", "L", "CMYK"):
                    result = result.convert("RGB")
                result.save(target, format="JPEG", quality=self.format.quality)
        except (OSError, ValueError) as exc:
            raise Error(str(exc)) from exc

    def _resize(self, img: Image.Image) -> Image.Image:
        img_w, img_h = img.size
        kind, w, h = self.op.kind, self.op.width, self.op.height
        if kind is ResizeKind.SCALE:
            return img.resize((w, h), _RESIZE_FILTER)
        if kind is ResizeKind.FIT_WIDTH:
            return img.resize(_fit_dimensions(img_w, img_h, w, _U32_MAX), _RESIZE_FILTER)
        if kind is ResizeKind.FIT_HEIGHT:
            return img.resize(_fit_dimensions(img_w, img_h, _U32_MAX, h), _RESIZE_FILTER)
        if kind is ResizeKind.FIT:
            return img.resize(_fit_dimensions(img_w, img_h, w, h), _RESIZE_FILTER)

        factor_w = img_w / w
        factor_h = img_h / h
        if abs(factor_w - factor_h) <= _RATIO_EPSILON:
            # Aspect ratios are close enough that cropping is pointless.
            return img.resize((w, h), _RESIZE_FILTER)
        # Crop first so fewer pixels need resizing.
        if factor_w < factor_h:
            crop_w, crop_h = img_w, _round(factor_w * h)
            offset_w, offset_h = 0, (img_h - crop_h) // 2
        else:
            crop_w, crop_h = _round(factor_h * w), img_h
            offset_w, offset_h = (img_w - crop_w) // 2, 0
        cropped = img.crop((offset_w, offset_h, offset_w + crop_w, offset_h + crop_h))
        return cropped.resize((w, h), _RESIZE_FILTER)


def _resized_url(base_url: str) -> str:
    if base_url.endswith("/"):
        return f"{base_url}{RESIZED_SUBDIR}"
    return f"{base_url}/{RESIZED_SUBDIR}"


class Processor:
    """Queue of image operations whose results go under ``static_path``."""

    def __init__(
        self,
        content_path: str | PathLike[str],
        static_path: str | PathLike[str],
        base_url: str,
    ) -> None:
        self.content_path = Path(content_path)
        self.resized_path = Path(static_path) / RESIZED_SUBDIR
        self.resized_url = _resized_url(base_url)
        self._img_ops: dict[int, ImageOp] = {}
        self._img_ops_collisions: list[ImageOp] = []

    def set_base_url(self, base_url: str) -> None:
        """Change the base URL used for the returned image URLs."""
        self.resized_url = _resized_url(base_url)

    def source_exists(self, source: str) -> bool:
        """Whether ``source`` exists under the content directory."""
        return (self.content_path / source).exists()

    def num_img_ops(self) -> int:
        """The number of distinct operations queued."""
        return len(self._img_ops) + len(self._img_ops_collisions)

    def _insert_with_collisions(self, img_op: ImageOp) -> int:
        existing = self._img_ops.get(img_op.hash)
        if existing is None:
            self._img_ops[img_op.hash] = img_op
            return 0
        if existing == img_op:
            return 0

        # A hash collision: colliding operations get sequential ids from 2,
        # the one already in the map gets id 1.
        collision_id = 2
        for op in self._img_ops_collisions:
            if op.hash != img_op.hash:
                continue
            if op == img_op:
                return collision_id
            collision_id += 1

        if collision_id == 2:
            existing.collision_id = 1
        img_op.collision_id = collision_id
        self._img_ops_collisions.append(img_op)
        return collision_id

    @staticmethod
    def _op_filename(hash_value: int, collision_id: int, fmt: Format) -> str:
        if collision_id >= 256:
            raise Error(f"Unexpectedly large number of collisions: {collision_id}")
        return f"{hash_value:016x}{collision_id:02x}.{fmt.extension}"

    def insert(self, img_op: ImageOp) -> str:
        """Queue an operation and return the URL its output will have."""
        hash_value, fmt = img_op.hash, img_op.format
        collision_id = self._insert_with_collisions(img_op)
        return f"{self.resized_url}/{self._op_filename(hash_value, collision_id, fmt)}"

    def prune(self) -> None:
        """Delete processed images that no queued operation produces."""
        if not self.resized_path.exists():
            return
        self.resized_path.mkdir(parents=True, exist_ok=True)
        try:
            for entry in self.resized_path.iterdir():
                if not entry.is_file():
                    continue
                match = RESIZED_FILENAME.search(entry.name)
                if match is None:
                    continue
                hash_value = int(match.group(1), 16)
                collision_id = int(match.group(2), 16)
                if collision_id > 0 or hash_value not in self._img_ops:
                    entry.unlink()
        except OSError as exc:
            raise Error(str(exc)) from exc

    def _process_one(self, img_op: ImageOp) -> None:
        target = self.resized_path / self._op_filename(
            img_op.hash, img_op.collision_id, img_op.format
        )
        try:
            img_op.perform(self.content_path, target)
        except Error as exc:
            raise chain(f"Failed to process image: {img_op.source}", exc) from exc

    def do_process(self) -> None:
        """Perform every queued operation whose output is out of date."""
        if self._img_ops:
            try:
                os.makedirs(self.resized_path, exist_ok=True)
            except OSError as exc:
                raise Error(str(exc)) from exc
        with ThreadPoolExecutor() as pool:
            for _ in pool.map(self._process_one, list(self._img_ops.values())):
                pass