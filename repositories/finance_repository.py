"""
Finance repositories - expenses and income records
"""

from typing import List, Optional

from bson import ObjectId

from repositories.base import OwnedRepository, Document


class _TransactionRepository(OwnedRepository):
    def list_filtered(
        self,
        user_id: ObjectId,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = 100,
    ) -> List[Document]:
        """Transactions in an inclusive ``YYYY-MM-DD`` range, newest first."""
        filters: Document = {}
        date_range: Document = {}
        if start_date:
            date_range["$gte"] = start_date
        if end_date:
            date_range["$lte"] = end_date
        if date_range:
            filters["date"] = date_range
        if category:
            filters["category"] = category
        return self.list_owned(
            user_id,
            filters,
            sort=[("date", -1), ("created_at", -1)],
            limit=limit,
        )


class ExpenseRepository(_TransactionRepository):
    collection_name = "expenses"


class IncomeRepository(_TransactionRepository):
    collection_name = "income"
