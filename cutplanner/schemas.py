from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict


class RequirementItem(BaseModel):
    # Callers send camelCase itemType; snake_case is accepted too
    model_config = ConfigDict(populate_by_name=True)

    size: float
    unit: str = "mm"
    quantity: float = 1
    item_type: Optional[str] = Field(default=None, alias="itemType")
    description: Optional[str] = None
    tag: Optional[str] = None
    material: Optional[dict] = None
    material_key: Optional[str] = None

    def as_requirement_dict(self) -> dict:
        return {
            "size": self.size,
            "unit": self.unit,
            "quantity": self.quantity,
            "itemType": self.item_type,
            "description": self.description,
            "tag": self.tag,
            "material": self.material,
            "material_key": self.material_key,
        }


class PlanOptions(BaseModel):
    stock_lengths: Optional[List[float]] = None
    kerf: Optional[float] = None
    policy: Optional[str] = None


class CuttingPlanRequest(PlanOptions):
    items: List[RequirementItem] = []
    include_diagram: bool = False


class GroupedCuttingPlanRequest(PlanOptions):
    items: List[RequirementItem] = []
    groups: Dict[str, List[RequirementItem]] = {}
    weights_kg_per_m: Dict[str, float] = {}


class PlacedPiece(BaseModel):
    length: float
    tag: Optional[str] = None
    requirement_index: int


class UnplaceablePiece(PlacedPiece):
    reason: str


class Bar(BaseModel):
    number: int
    stock_length: float
    placed_pieces: List[PlacedPiece]
    piece_count: int
    used_length: float
    kerf_length: float
    waste_length: float
    waste_percentage: float


class StockCount(BaseModel):
    stock_length: float
    count: int


class CuttingPlan(BaseModel):
    bars: List[Bar]
    unplaceable: List[UnplaceablePiece]
    stock_options: List[float]
    kerf: float
    policy: str
    total_bars_used: int
    total_pieces: int
    total_used_length: float
    total_kerf_length: float
    total_stock_length: float
    total_waste: float
    waste_percentage: float
    bars_by_stock_length: List[StockCount]
    diagram: Optional[List[dict]] = None


class MaterialCuttingPlan(CuttingPlan):
    weight_kg: Optional[float] = None


class GroupedSummary(BaseModel):
    groups: int
    total_pieces: int
    total_bars_used: int
    total_used_length: float
    total_stock_length: float
    total_waste: float
    waste_percentage: float
    unplaceable_count: int
    total_weight_kg: Optional[float] = None


class GroupedCuttingPlan(BaseModel):
    groups: Dict[str, MaterialCuttingPlan]
    summary: GroupedSummary


class PlannerDefaults(BaseModel):
    stock_length: float
    kerf: float
    policy: str
    policies: List[str]
    units: List[str]
