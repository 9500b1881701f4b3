"""
上传文件存储模块
文件保存到 UPLOAD_DIR，通过 /uploads/<文件名> 静态访问
"""
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import aiofiles
from fastapi import UploadFile, status

from config.settings import settings
from utils.exceptions import FileOperationException

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".svg"}
# 缺陷附件在图片之外还允许常见的日志和文档格式
ATTACHMENT_EXTENSIONS = IMAGE_EXTENSIONS | {".pdf", ".txt", ".log", ".json", ".csv", ".mp4", ".webm"}

UPLOAD_URL_PREFIX = "/uploads"


def ensure_upload_dir() -> Path:
    """确保上传目录存在"""
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def generate_filename(original_filename: str) -> str:
    """生成唯一的文件名"""
    file_ext = Path(original_filename).suffix.lower()
    unique_id = uuid.uuid4().hex
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{timestamp}_{unique_id}{file_ext}"


def validate_upload(file: UploadFile, allowed_extensions: Sequence[str]) -> None:
    """校验文件扩展名"""
    file_ext = Path(file.filename or "").suffix.lower()
    if file_ext not in allowed_extensions:
        raise FileOperationException(
            f"Unsupported file type '{file_ext or file.filename}'. Allowed: {', '.join(sorted(allowed_extensions))}"
        )


async def read_upload(file: UploadFile, allowed_extensions: Sequence[str]) -> bytes:
    """校验扩展名和大小，返回文件内容，不写磁盘"""
    validate_upload(file, allowed_extensions)

    content = await file.read()
    if len(content) > settings.MAX_FILE_SIZE:
        raise FileOperationException(
            f"File '{file.filename}' exceeds the {settings.MAX_FILE_SIZE // (1024 * 1024)}MB limit",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )
    return content


async def write_upload(original_filename: str, content: bytes) -> str:
    """
    写入已校验的文件内容

    返回:
        可访问的相对URL，例如 /uploads/20240501_120000_<uuid>.png
    """
    upload_dir = ensure_upload_dir()
    filename = generate_filename(original_filename or "upload")
    async with aiofiles.open(upload_dir / filename, 'wb') as f:
        await f.write(content)

    logger.info(f"保存上传文件: {original_filename} -> {filename} ({len(content)} bytes)")
    return f"{UPLOAD_URL_PREFIX}/{filename}"


async def save_upload(file: UploadFile, allowed_extensions: Sequence[str] = ATTACHMENT_EXTENSIONS) -> str:
    """保存单个上传文件"""
    content = await read_upload(file, allowed_extensions)
    return await write_upload(file.filename, content)


async def save_uploads(files: Optional[List[UploadFile]]) -> List[str]:
    """批量保存缺陷附件，数量不超过 MAX_UPLOAD_FILES；全部校验通过后才写盘"""
    files = [f for f in (files or []) if f.filename]
    if len(files) > settings.MAX_UPLOAD_FILES:
        raise FileOperationException(f"At most {settings.MAX_UPLOAD_FILES} files can be uploaded at once")

    contents = [await read_upload(file, ATTACHMENT_EXTENSIONS) for file in files]

    saved = []
    try:
        for file, content in zip(files, contents):
            saved.append(await write_upload(file.filename, content))
    except OSError:
        delete_uploads(saved)
        raise
    return saved


def delete_uploads(urls: Iterable[str]) -> None:
    """删除已保存的上传文件，用于后续处理失败时清理"""
    upload_dir = ensure_upload_dir()
    for url in urls:
        path = upload_dir / Path(url).name
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning(f"待清理的上传文件不存在: {path}")
        else:
            logger.info(f"已清理上传文件: {path.name}")
