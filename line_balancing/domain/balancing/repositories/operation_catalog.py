"""
Operation Catalog Interface

Defines the contract for reading product operation lists.
"""

from abc import ABC, abstractmethod

from ...shared.base import ValueObject
from ..value_objects.operation import Operation


class ProcessInfo(ValueObject):
    """A production process operations can belong to."""

    process_id: str
    name: str


class OperationCatalog(ABC):
    """
    Abstract catalog of products and their ordered operation lists.

    The balancing engine only reads from the catalog.
    """

    @abstractmethod
    def get_operations_for_product(self, product_id: str) -> list[Operation]:
        """
        Retrieve the ordered operation list of a product.

        Args:
            product_id: Product identifier

        Returns:
            Operations in operation sheet order

        Raises:
            NoOperationListFound: If the product has no operation sheet
        """
        pass

    @abstractmethod
    def list_processes(self) -> list[ProcessInfo]:
        """
        Retrieve all known processes.

        Returns:
            Processes in production order
        """
        pass
