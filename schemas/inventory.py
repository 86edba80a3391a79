from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PageQuery(BaseModel):
    page: Optional[int] = None
    size: Optional[int] = None
    sorting_field: Optional[str] = None
    sorting_dir: Optional[str] = None


class InventoryRow(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    codice: Optional[str] = None
    materiale: Optional[str] = None
    spessore: Optional[float] = None
    dim_x: Optional[float] = Field(default=None, alias="dimX")
    dim_y: Optional[float] = Field(default=None, alias="dimY")
    area: Optional[float] = None
    peso: Optional[float] = None
    ritaglio: Optional[int] = None
    qta: Optional[int] = None
    udata1: Optional[str] = None
    udata2: Optional[str] = None
    udata3: Optional[str] = None


class PageResult(BaseModel):
    results: List[InventoryRow]
    current_page: int
    total_pages: int
    total_count: int
