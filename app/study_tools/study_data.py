"""
Per-account study history: quizzes, flashcard decks and homework answers.
"""
from pathlib import Path
from threading import RLock
from typing import Callable, List, TypeVar

from app.json_store import JsonFileStore
from study_service.errors import RecordNotFoundError

from .models import FlashcardDeck, HomeworkEntry, QuizAttempt

T = TypeVar("T")

MAX_HOMEWORK_HISTORY = 100


class StudyData:
    """Study data file for one account.

    Shape:
    {
      "quizzes": [QuizAttempt dict, ...],      newest first
      "decks": [FlashcardDeck dict, ...],      newest first
      "homework": [HomeworkEntry dict, ...]    newest first
    }
    """

    def __init__(self, uid: str, user_data_dir: Path, lock: RLock):
        self.uid = uid
        self.store = JsonFileStore(user_data_dir / f"{uid}.json", lock=lock)

    @property
    def lock(self) -> RLock:
        return self.store.lock

    def _items(self, section: str, factory: Callable[[dict], T]) -> List[T]:
        raw = self.store.load().get(section, [])
        return [factory(item) for item in raw if isinstance(item, dict)]

    def _find(self, section: str, item_id: str, factory: Callable[[dict], T], label: str) -> T:
        for item in self.store.load().get(section, []):
            if isinstance(item, dict) and item.get("id") == item_id:
                return factory(item)
        raise RecordNotFoundError(f"{label} {item_id} not found")

    def _upsert(self, section: str, record: dict, limit: int = None) -> None:
        """Replace the record with the same id in place, or add it first."""
        with self.lock:
            data = self.store.load()
            items = [i for i in data.get(section, []) if isinstance(i, dict)]
            for pos, item in enumerate(items):
                if item.get("id") == record["id"]:
                    items[pos] = record
                    break
            else:
                items.insert(0, record)
            data[section] = items[:limit] if limit else items
            self.store.save(data)

    # Quizzes

    def load_quizzes(self) -> List[QuizAttempt]:
        return self._items("quizzes", QuizAttempt.from_dict)

    def get_quiz(self, quiz_id: str) -> QuizAttempt:
        return self._find("quizzes", quiz_id, QuizAttempt.from_dict, "Quiz")

    def save_quiz(self, quiz: QuizAttempt) -> None:
        self._upsert("quizzes", quiz.to_dict())

    # Flashcard decks

    def load_decks(self) -> List[FlashcardDeck]:
        return self._items("decks", FlashcardDeck.from_dict)

    def get_deck(self, deck_id: str) -> FlashcardDeck:
        return self._find("decks", deck_id, FlashcardDeck.from_dict, "Deck")

    def save_deck(self, deck: FlashcardDeck) -> None:
        self._upsert("decks", deck.to_dict())

    # Homework

    def load_homework(self) -> List[HomeworkEntry]:
        return self._items("homework", HomeworkEntry.from_dict)

    def add_homework(self, entry: HomeworkEntry) -> None:
        self._upsert("homework", entry.to_dict(), limit=MAX_HOMEWORK_HISTORY)


class StudyDataManager:
    """Hands out StudyData objects that share one lock."""

    def __init__(self, user_data_dir: Path):
        self.user_data_dir = Path(user_data_dir)
        self.user_data_dir.mkdir(parents=True, exist_ok=True)
        self.lock = RLock()

    def get(self, uid: str) -> StudyData:
        return StudyData(uid, self.user_data_dir, self.lock)
