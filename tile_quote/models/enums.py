from enum import Enum

class TileType(str, Enum):
    WALL = "Wall"
    FLOOR = "Floor"
    EXTERNAL_WALL = "External Wall"
    STEP = "Step"
    UNKNOWN = "Unknown"

class CategoryBucket(str, Enum):
    SITTING_ROOM = "sitting_room"
    BEDROOM = "bedroom"
    TOILET_WALL = "toilet_wall"
    TOILET_FLOOR = "toilet_floor"
    KITCHEN_WALL = "kitchen_wall"
    KITCHEN_FLOOR = "kitchen_floor"
    EXTERNAL_WALL = "external_wall"
    STEP = "step"
    GENERAL_WALL = "general_wall"
    GENERAL_FLOOR = "general_floor"

class PriceSource(str, Enum):
    OVERRIDE = "override"
    SIZE_RULE = "size_rule"
    CATEGORY = "category"
    FALLBACK = "fallback"

class QuantityKind(str, Enum):
    FROM_AREA = "from_area"
    FROM_CARTONS = "from_cartons"
    UNSPECIFIED = "unspecified"

class WastageDirection(str, Enum):
    ADD = "add"
    REMOVE = "remove"

class QuotationStatus(str, Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    INVOICED = "Invoiced"

class InvoiceStatus(str, Enum):
    UNPAID = "Unpaid"
    PAID = "Paid"
    OVERDUE = "Overdue"
