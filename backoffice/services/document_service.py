# backoffice/services/document_service.py
import math

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.data.models.document import DocumentModel, DocumentType
from backoffice.data.models.order import OrderModel
from backoffice.data.models.user import UserModel
from backoffice.domain.errors import Conflict, NotFound, NotFoundOrForbidden
from backoffice.domain.schemas import (
    DocumentDetailOut,
    DocumentListOut,
    DocumentOut,
    DocumentPagination,
    DocumentSummaryOut,
    OrderDocumentsOut,
    OrderItemOut,
)
from backoffice.repos.document_repo import DocumentRepo
from backoffice.repos.order_repo import OrderRepo
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


class DocumentService:
    """
    Invoice / receipt / report records issued for orders.

    - one document per order and type
    - non-admin callers only see documents of their own orders
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = DocumentRepo(db)
        self.orders = OrderRepo(db)

    @staticmethod
    def _summary(document: DocumentModel, order: OrderModel, owner: UserModel) -> dict:
        return dict(
            id=document.id,
            order_id=document.order_id,
            doc_type=document.doc_type,
            created_at=document.created_at,
            total=order.total,
            order_status=order.status,
            order_created_at=order.created_at,
            user_name=owner.name,
            user_email=owner.email,
        )

    # =====================================================
    # QUERY
    # =====================================================
    def list_documents(
        self,
        caller_id: int,
        is_admin: bool,
        doc_type: str | None = None,
        order_id: int | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> DocumentListOut:
        rows = self.repo.list_documents(caller_id, is_admin, doc_type, order_id, skip=(page - 1) * limit, limit=limit)
        total = self.repo.count_documents(caller_id, is_admin, doc_type, order_id)
        total_pages = math.ceil(total / limit) if limit else 0

        return DocumentListOut(
            documents=[DocumentSummaryOut(**self._summary(*row)) for row in rows],
            pagination=DocumentPagination(
                current_page=page,
                total_pages=total_pages,
                total_documents=total,
                has_next_page=page < total_pages,
                has_prev_page=page > 1,
            ),
        )

    def get_document(self, document_id: int, caller_id: int, is_admin: bool) -> DocumentDetailOut:
        """Document with its order and the order's lines."""
        row = self.repo.get_with_order(document_id, caller_id, is_admin)
        if not row:
            raise NotFound("Document not found")

        document, order, owner = row
        items = self.orders.get_items(order.id)

        return DocumentDetailOut(
            **self._summary(document, order, owner),
            payment_method=order.payment_method,
            items=[
                OrderItemOut(
                    id=i.id,
                    product_id=i.product_id,
                    product_name=i.product.name if i.product else None,
                    quantity=i.quantity,
                    subtotal=i.subtotal,
                    current_price=i.product.price if i.product else None,
                )
                for i in items
            ],
        )

    def list_for_order(self, order_id: int, caller_id: int, is_admin: bool) -> OrderDocumentsOut:
        order = self.orders.get_order_for_caller(order_id, caller_id, is_admin)
        if not order:
            raise NotFoundOrForbidden("Transaction not found or access denied")

        documents = [DocumentOut.model_validate(d) for d in self.repo.list_for_order(order.id)]
        return OrderDocumentsOut(order_id=order.id, documents=documents, count=len(documents))

    # =====================================================
    # COMMANDS
    # =====================================================
    def generate(self, order_id: int, doc_type: DocumentType, caller_id: int, is_admin: bool) -> DocumentOut:
        """
        Use Case: issue a document for an order.

        A second document of the same type for the same order is refused,
        pointing at the existing one.
        """
        order = self.orders.get_order_for_caller(order_id, caller_id, is_admin)
        if not order:
            raise NotFoundOrForbidden()

        existing = self.repo.get_for_order_and_type(order.id, doc_type.value)
        if existing:
            raise Conflict(
                "Document of this type already exists for this transaction",
                {"existing_document_id": existing.id},
            )

        try:
            document = self.repo.add(DocumentModel(order_id=order.id, doc_type=doc_type.value))
            self.db.commit()
        except IntegrityError:
            # lost a race against an identical request
            self.db.rollback()
            existing = self.repo.get_for_order_and_type(order_id, doc_type.value)
            raise Conflict(
                "Document of this type already exists for this transaction",
                {"existing_document_id": existing.id if existing else None},
            )
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(document)
        logger.info(f"Document {document.id} ({doc_type.value}) generated for order {order_id}")
        return DocumentOut.model_validate(document)

    def delete(self, document_id: int) -> None:
        document = self.repo.get_document(document_id)
        if not document:
            raise NotFound("Document not found")

        try:
            self.repo.delete(document)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Document {document_id} deleted")
