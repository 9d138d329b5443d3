import os
import tarfile
import zipfile
import logging
from typing import List, Optional

import py7zr

logger = logging.getLogger(__name__)


class ArchiveExtractor:
    """Helper class to pull an SCL document out of an archive (zip, tar, 7z)."""

    SCL_EXTENSIONS = ('.cid', '.icd', '.iid', '.scd', '.xml')
    ARCHIVE_EXTENSIONS = ('.zip', '.tar', '.tar.gz', '.tgz', '.7z')

    @staticmethod
    def is_archive(path: str) -> bool:
        """Check if file is a supported archive."""
        return path.lower().endswith(ArchiveExtractor.ARCHIVE_EXTENSIONS)

    @staticmethod
    def list_files(path: str) -> List[str]:
        """List regular files inside an archive."""
        lower = path.lower()
        if lower.endswith('.zip'):
            with zipfile.ZipFile(path, 'r') as zf:
                return [info.filename for info in zf.infolist() if not info.is_dir()]
        if lower.endswith(('.tar', '.tar.gz', '.tgz')):
            with tarfile.open(path, 'r') as tf:
                return [m.name for m in tf.getmembers() if m.isfile()]
        if lower.endswith('.7z'):
            with py7zr.SevenZipFile(path, mode='r') as z:
                return [info.filename for info in z.list() if not info.is_directory]
        raise ValueError(f"Unsupported archive type: {path}")

    @staticmethod
    def pick_scl_member(names: List[str]) -> Optional[str]:
        """
        Choose the SCL document among archive members.
        Configured documents (.cid) win over capability descriptions (.icd),
        then instantiated (.iid), substation (.scd) and plain .xml files.
        """
        for ext in ArchiveExtractor.SCL_EXTENSIONS:
            for name in names:
                if name.lower().endswith(ext):
                    return name
        return None

    @staticmethod
    def extract_file(archive_path: str, member: str, dest_dir: str) -> str:
        """
        Extract one member of archive_path into dest_dir.
        Returns full path to the extracted file.
        """
        lower = archive_path.lower()
        if lower.endswith('.zip'):
            with zipfile.ZipFile(archive_path, 'r') as zf:
                return zf.extract(member, dest_dir)
        if lower.endswith(('.tar', '.tar.gz', '.tgz')):
            with tarfile.open(archive_path, 'r') as tf:
                info = tf.getmember(member)
                # Only the selected regular file is written, under a flat name
                source = tf.extractfile(info)
                if source is None:
                    raise ValueError(f"Archive member is not a file: {member}")
                out_path = os.path.join(dest_dir, os.path.basename(member))
                with source, open(out_path, 'wb') as f_out:
                    f_out.write(source.read())
                return out_path
        if lower.endswith('.7z'):
            with py7zr.SevenZipFile(archive_path, mode='r') as z:
                z.extract(path=dest_dir, targets=[member])
            return os.path.join(dest_dir, member)
        raise ValueError(f"Unsupported archive type: {archive_path}")
