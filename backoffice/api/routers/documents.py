# backoffice/api/routers/documents.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backoffice.api.deps import get_current_admin, get_current_user
from backoffice.data.database import get_db
from backoffice.data.models.document import DocumentType
from backoffice.data.models.user import UserModel
from backoffice.domain.schemas import (
    DocumentDetailOut,
    DocumentGenerateIn,
    DocumentListOut,
    DocumentOut,
    OrderDocumentsOut,
)
from backoffice.services.document_service import DocumentService

router = APIRouter(prefix="/api/documents", tags=["documents"])


def get_service(db: Session):
    return DocumentService(db)


@router.get("/", response_model=DocumentListOut)
def list_documents(
    doc_type: DocumentType | None = Query(None, alias="tipe_dokumen"),
    order_id: int | None = Query(None, alias="transaction_id"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_service(db).list_documents(
        user.id,
        user.is_admin,
        doc_type=doc_type.value if doc_type else None,
        order_id=order_id,
        page=page,
        limit=limit,
    )


@router.post("/generate/{order_id}", response_model=DocumentOut, status_code=201)
def generate_document(
    order_id: int,
    payload: DocumentGenerateIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_service(db).generate(order_id, payload.doc_type, user.id, user.is_admin)


@router.get("/transaction/{order_id}", response_model=OrderDocumentsOut)
def documents_for_transaction(
    order_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_service(db).list_for_order(order_id, user.id, user.is_admin)


@router.get("/{document_id}", response_model=DocumentDetailOut)
def get_document(
    document_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_service(db).get_document(document_id, user.id, user.is_admin)


@router.delete("/{document_id}")
def delete_document(
    document_id: int,
    admin: UserModel = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    get_service(db).delete(document_id)
    return {"success": True, "message": "Document deleted successfully"}
