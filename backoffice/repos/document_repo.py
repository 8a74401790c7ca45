# backoffice/repos/document_repo.py
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from backoffice.data.models.document import DocumentModel
from backoffice.data.models.order import OrderModel
from backoffice.data.models.user import UserModel


class DocumentRepo:
    def __init__(self, db: Session):
        self.db = db

    # =====================================================
    # QUERY
    # =====================================================
    def get_for_order_and_type(self, order_id: int, doc_type: str) -> DocumentModel | None:
        return self.db.execute(
            select(DocumentModel).where(
                DocumentModel.order_id == order_id,
                DocumentModel.doc_type == doc_type,
            )
        ).scalar_one_or_none()

    def get_document(self, document_id: int) -> DocumentModel | None:
        return self.db.get(DocumentModel, document_id)

    def get_with_order(
        self, document_id: int, user_id: int, is_admin: bool
    ) -> tuple[DocumentModel, OrderModel, UserModel] | None:
        stmt = self._joined(select(DocumentModel, OrderModel, UserModel), user_id, is_admin).where(
            DocumentModel.id == document_id
        )
        row = self.db.execute(stmt).first()
        return tuple(row) if row else None

    def _joined(self, stmt, user_id: int, is_admin: bool):
        stmt = stmt.join(OrderModel, DocumentModel.order_id == OrderModel.id).join(
            UserModel, OrderModel.user_id == UserModel.id
        )
        if not is_admin:
            stmt = stmt.where(OrderModel.user_id == user_id)
        return stmt

    def _filtered(self, stmt, user_id: int, is_admin: bool, doc_type: str | None, order_id: int | None):
        stmt = self._joined(stmt, user_id, is_admin)
        if doc_type:
            stmt = stmt.where(DocumentModel.doc_type == doc_type)
        if order_id is not None:
            stmt = stmt.where(DocumentModel.order_id == order_id)
        return stmt

    def list_documents(
        self,
        user_id: int,
        is_admin: bool,
        doc_type: str | None = None,
        order_id: int | None = None,
        skip: int = 0,
        limit: int = 10,
    ) -> list[tuple[DocumentModel, OrderModel, UserModel]]:
        """Documents newest first, visible to the caller, each with its order and owner."""
        stmt = self._filtered(select(DocumentModel, OrderModel, UserModel), user_id, is_admin, doc_type, order_id)
        stmt = stmt.order_by(DocumentModel.created_at.desc(), DocumentModel.id.desc()).offset(skip).limit(limit)
        return [tuple(row) for row in self.db.execute(stmt).all()]

    def count_documents(
        self,
        user_id: int,
        is_admin: bool,
        doc_type: str | None = None,
        order_id: int | None = None,
    ) -> int:
        stmt = self._filtered(select(func.count(DocumentModel.id)), user_id, is_admin, doc_type, order_id)
        return self.db.execute(stmt).scalar_one()

    def list_for_order(self, order_id: int) -> list[DocumentModel]:
        return list(
            self.db.execute(
                select(DocumentModel)
                .where(DocumentModel.order_id == order_id)
                .order_by(DocumentModel.created_at.desc(), DocumentModel.id.desc())
            ).scalars().all()
        )

    # =====================================================
    # COMMANDS
    # =====================================================
    def add(self, document: DocumentModel) -> DocumentModel:
        self.db.add(document)
        self.db.flush()
        return document

    def delete(self, document: DocumentModel) -> None:
        self.db.delete(document)
        self.db.flush()
