from sqlmodel import SQLModel, Field


class Counter(SQLModel, table=True):
    """Named monotonic counter, advanced only by an atomic upsert."""
    name: str = Field(primary_key=True)
    seq: int = Field(default=0)
