from sqlalchemy import Column, MetaData, String, Table, Text

metadata = MetaData()

# One row per document; ``collection`` is the slash-joined parent path
documents = Table(
    "documents",
    metadata,
    Column("collection", String(255), primary_key=True),
    Column("doc_id", String(255), primary_key=True),
    Column("data", Text, nullable=False),
)
