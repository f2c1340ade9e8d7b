"""SQLAlchemy Invoice Repository Implementation

Implements invoice persistence using SQLAlchemy async session.
"""

from typing import Optional
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.invoice import Invoice, InvoiceSequence


class SqlAlchemyInvoiceRepository(InvoiceRepository):
    """
    SQLAlchemy implementation of InvoiceRepository

    Uses async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice with generated ID
        """
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        statement = select(Invoice).where(Invoice.id == invoice_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_last_for_sensor(self, sensor_id: int) -> Optional[Invoice]:
        statement = (
            select(Invoice)
            .where(Invoice.sensor_id == sensor_id)
            .order_by(Invoice.period_end.desc())
            .limit(1)
        )
        result = await self.session.execute(statement)
        return result.scalars().first()

    async def next_invoice_number(self, prefix: str = "FAC") -> str:
        """
        Reserve the next invoice number

        The UPDATE takes a row lock that is held until the surrounding
        transaction ends, so concurrent allocations are serialized.

        Format: {prefix}-NNNNNN (e.g., FAC-000001)

        Returns:
            Unique invoice number string
        """
        statement = (
            update(InvoiceSequence)
            .where(InvoiceSequence.name == prefix)
            .values(last_value=InvoiceSequence.last_value + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)

        if result.rowcount == 0:
            # First invoice for this prefix
            self.session.add(InvoiceSequence(name=prefix, last_value=1))
            await self.session.flush()
            sequence = 1
        else:
            value = await self.session.execute(
                select(InvoiceSequence.last_value).where(InvoiceSequence.name == prefix)
            )
            sequence = value.scalar_one()

        return f"{prefix}-{sequence:06d}"
