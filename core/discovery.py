"""
Broken Files Creator v1.0 - Input Discovery
입력 파일/폴더에서 처리할 파일 목록 수집
"""

import os
from typing import List

MAX_DEPTH = 999


def collect_files(input_path: str, max_depth: int = MAX_DEPTH) -> List[str]:
    """
    입력 경로에서 파일 수집

    Args:
        input_path: 파일 또는 폴더
        max_depth: 폴더 탐색 최대 깊이 (1 이면 하위 폴더 제외)

    Returns:
        이름에 '.' 이 있는 파일의 절대 경로 (정렬됨)

    Raises:
        FileNotFoundError: 입력 경로가 없을 때
    """
    if not os.path.exists(input_path):
        raise FileNotFoundError(f"Path should exist {input_path}")

    root = os.path.abspath(input_path)
    files: List[str] = []

    if os.path.isfile(root):
        files.append(root)
    else:
        base_depth = root.rstrip(os.sep).count(os.sep)
        for dirpath, dirnames, filenames in os.walk(root):
            depth = dirpath.rstrip(os.sep).count(os.sep) - base_depth + 1
            if depth >= max_depth:
                # 더 깊이 내려가지 않음
                dirnames[:] = []
            for name in filenames:
                path = os.path.join(dirpath, name)
                if os.path.isfile(path):
                    files.append(path)

    return sorted(f for f in files if "." in os.path.basename(f))
