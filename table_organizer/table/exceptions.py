"""Domain exceptions raised by the table manager."""


class TableError(Exception):
    """Base exception for table operations."""
    pass


class DuplicatePersonError(TableError):
    """A person with this name is already at the table."""
    
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Person already exists: {name}")


class EntityNotTrackedError(TableError):
    """The person or consumable does not belong to this table."""
    pass
