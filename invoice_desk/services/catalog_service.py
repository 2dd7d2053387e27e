from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union

from invoice_desk.errors import ValidationFailed
from invoice_desk.models.common import parse_input
from invoice_desk.models.product import Category, CategoryDraft, Product, ProductDraft
from invoice_desk.storage.api import ApiClient
from invoice_desk.storage.rest_repo import Page, RestRepository


def _norm_name(name: Optional[str]) -> str:
    return " ".join((name or "").split()).casefold()


class CatalogService:
    """
    Categories & products.
    - Soft delete only: rows carry `deletedAt`, listing hides them unless
      `include_deleted` is set
    - Names are unique among live rows (checked before create/rename)
    """

    def __init__(self, api: ApiClient):
        self.categories_repo = RestRepository(api, "categories", Category, entity_name="category")
        self.products_repo = RestRepository(api, "products", Product, entity_name="product")

    # ---------- Helpers ---------- #

    @staticmethod
    def _visibility(include_deleted: bool) -> Dict[str, Any]:
        # both spellings are understood by the backend
        return {
            "includeDeleted": include_deleted,
            "include_deleted": include_deleted,
        }

    @staticmethod
    def _find_by_name(rows: List[Any], name: str, exclude_id: Optional[str] = None) -> Optional[Any]:
        target = _norm_name(name)
        for r in rows:
            if r.is_deleted or (exclude_id and r.id == exclude_id):
                continue
            if _norm_name(r.name) == target:
                return r
        return None

    def _ensure_unique_category(self, name: str, exclude_id: Optional[str] = None) -> None:
        existing = self._find_by_name(self.list_categories(q=name).items, name, exclude_id)
        if existing is not None:
            raise ValidationFailed(f'Category "{existing.name}" already exists', field="name")

    # ---------- Categories ---------- #

    def list_categories(
        self,
        q: Optional[str] = None,
        include_deleted: bool = False,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Page[Category]:
        q = (q or "").strip()
        params = {"q": q, "search": q, "name": q, "page": page, "limit": limit}
        params.update(self._visibility(include_deleted))
        result = self.categories_repo.list_page(params)
        if not include_deleted:
            result.items = [c for c in result.items if not c.is_deleted]
        return result

    def add_category(self, data: Union[CategoryDraft, Mapping[str, Any], str]) -> Category:
        if isinstance(data, str):
            data = {"name": data}
        draft = parse_input(CategoryDraft, data)
        self._ensure_unique_category(draft.name)
        return self.categories_repo.add(draft)

    def rename_category(self, category_id: str, name: str) -> Category:
        draft = parse_input(CategoryDraft, {"name": name})
        self._ensure_unique_category(draft.name, exclude_id=category_id)
        return self.categories_repo.update(category_id, draft)

    def delete_category(self, category_id: str) -> Optional[str]:
        return self.categories_repo.delete(category_id)

    # ---------- Products ---------- #

    def list_products(
        self,
        q: Optional[str] = None,
        category_id: Optional[str] = None,
        include_deleted: bool = False,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Page[Product]:
        params: Dict[str, Any] = {
            "q": (q or "").strip(),
            "categoryId": category_id,
            "includeDeleted": include_deleted,
            "page": page,
            "limit": limit,
        }
        result = self.products_repo.list_page(params)
        if not include_deleted:
            result.items = [p for p in result.items if not p.is_deleted]
        return result

    def get_product(self, product_id: str) -> Product:
        return self.products_repo.get_by_id(product_id)

    def add_product(self, data: Union[ProductDraft, Mapping[str, Any]]) -> Product:
        draft = parse_input(ProductDraft, data)
        return self.products_repo.add(draft)

    def update_product(self, product_id: str, data: Union[ProductDraft, Mapping[str, Any]]) -> Product:
        draft = parse_input(ProductDraft, data)
        return self.products_repo.update(product_id, draft)

    def delete_product(self, product_id: str) -> Optional[str]:
        return self.products_repo.delete(product_id)
