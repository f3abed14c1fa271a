from abc import ABC, abstractmethod


class StatsBaseDAO(ABC):
    """Interface for the global resolution counter.

    The counter is write-only from the shortener's point of view: it is
    incremented once per successful resolution and never read back.
    """

    @abstractmethod
    def increment(self, **kwargs) -> int:
        """Increment the global resolution counter by 1.

        Returns:
            int: The counter value after the increment.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass
