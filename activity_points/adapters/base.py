"""Abstract base adapter for reading activity submission requests."""

from abc import ABC, abstractmethod


class BaseAdapter(ABC):
    @abstractmethod
    def parse(self, data_path: str) -> list[dict]:
        """Parse submission requests and return a list of request dicts.

        Each dict must have keys:
            student_id, category_id, sub_activity_id, level_id

        and may carry:
            student_name, is_winner, duration, custom_name,
            date, evidence_type, remarks
        """
        pass
