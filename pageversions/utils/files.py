# Last reviewed: 2026-10-18 11:04:40 UTC (User: Teeksss)
import os
import shutil
import logging
from typing import Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

def ensure_dir(path: str) -> str:
    """Dizin yoksa oluşturur ve yolu döndürür"""
    os.makedirs(path, exist_ok=True)
    return path

def same_path(a: str, b: str) -> bool:
    return os.path.normpath(os.path.abspath(a)) == os.path.normpath(os.path.abspath(b))

def list_files(path: str) -> List[str]:
    """Dizindeki dosya adları (alt dizinler hariç)"""
    if not os.path.isdir(path):
        return []
    return sorted(
        name for name in os.listdir(path)
        if os.path.isfile(os.path.join(path, name))
    )

def copy_files(src: str, dst: str, names: Optional[Iterable[str]] = None) -> Tuple[List[str], List[str]]:
    """
    Dosyaları src dizininden dst dizinine kopyalar (özyinelemesiz)

    Args:
        src: Kaynak dizin
        dst: Hedef dizin
        names: Yalnızca bu dosya adları (None ise tüm dosyalar)

    Returns:
        Tuple[List[str], List[str]]: (kopyalananlar, başarısızlar)
    """
    copied: List[str] = []
    failed: List[str] = []

    if not os.path.isdir(src):
        return copied, failed
    if same_path(src, dst):
        logger.debug(f"Skipping copy onto itself: {src}")
        return copied, failed

    ensure_dir(dst)
    for name in (list_files(src) if names is None else names):
        name = os.path.basename(name)
        src_file = os.path.join(src, name)
        if not os.path.isfile(src_file):
            logger.warning(f"Unable to copy {src_file} to {dst}: file not found")
            failed.append(name)
            continue
        try:
            shutil.copy2(src_file, os.path.join(dst, name))
            copied.append(name)
        except OSError as e:
            logger.warning(f"Unable to copy {src_file} to {dst}: {str(e)}")
            failed.append(name)

    return copied, failed

def remove_files(path: str, names: Iterable[str]) -> List[str]:
    """Dizindeki adı verilen dosyaları siler, silinemeyenleri döndürür"""
    failed = []
    for name in names:
        file_path = os.path.join(path, os.path.basename(name))
        if not os.path.isfile(file_path):
            continue
        try:
            os.remove(file_path)
        except OSError as e:
            logger.warning(f"Unable to remove {file_path}: {str(e)}")
            failed.append(name)
    return failed

def empty_dir(path: str) -> List[str]:
    """Dizindeki dosyaları siler; alt dizinlere (versiyon dizinleri) dokunmaz"""
    return remove_files(path, list_files(path))

def rmdir(path: str, recursive: bool = False) -> bool:
    if not os.path.isdir(path):
        return False
    try:
        if recursive:
            shutil.rmtree(path)
        else:
            os.rmdir(path)
        return True
    except OSError as e:
        logger.warning(f"Unable to remove directory {path}: {str(e)}")
        return False

def dir_size(path: str) -> int:
    """Dizin ağacındaki dosyaların toplam boyutu (bayt)"""
    total = 0
    if not os.path.isdir(path):
        return total
    for root, _dirs, files in os.walk(path):
        for name in files:
            try:
                total += os.path.getsize(os.path.join(root, name))
            except OSError:
                continue
    return total
