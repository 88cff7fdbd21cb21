"""
EduBot Lesson Library — Singleton pattern for O(1) lesson lookup.
Loads all lesson JSON files from the lessons directory.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from edubot.content.lesson import Lesson

logger = logging.getLogger(__name__)

_instance: Optional["LessonLibrary"] = None


def get_lesson_library() -> "LessonLibrary":
    """Get singleton LessonLibrary instance."""
    global _instance
    if _instance is None:
        from edubot.config import LESSONS_DIR
        _instance = LessonLibrary(LESSONS_DIR)
    return _instance


class LessonLibrary:
    """
    Loads and indexes lesson JSON files by lesson_id (the file stem).

    Usage:
        library = get_lesson_library()
        lesson = library.get("capitals")
    """

    def __init__(self, lessons_dir: Union[str, Path, None] = None):
        self._lessons: Dict[str, Lesson] = {}
        if lessons_dir is not None:
            self._load_all(Path(lessons_dir))

    def _load_all(self, lessons_dir: Path):
        """
        Load every *.json file. Bad files are logged and skipped: undecodable
        bytes and bad JSON are ValueErrors, and so is LessonFormatError.
        """
        if not lessons_dir.is_dir():
            logger.warning(f"Lessons directory not found: {lessons_dir}")
            return

        for json_file in sorted(lessons_dir.glob("*.json")):
            try:
                with open(json_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                self.add(Lesson.from_dict(json_file.stem, data))
            except (OSError, ValueError) as e:
                logger.error(f"Skipping lesson file {json_file.name}: {e}")

        logger.info(f"Lesson library loaded {len(self._lessons)} lessons from {lessons_dir}")

    def add(self, lesson: Lesson) -> None:
        self._lessons[lesson.lesson_id] = lesson

    def get(self, lesson_id: str) -> Optional[Lesson]:
        return self._lessons.get(lesson_id)

    def list_lessons(self) -> List[Lesson]:
        return list(self._lessons.values())

    def __len__(self) -> int:
        return len(self._lessons)

    def __contains__(self, lesson_id: str) -> bool:
        return lesson_id in self._lessons
