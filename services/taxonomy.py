"""Static spending category taxonomy (child code -> parent envelope)"""
from typing import Dict, List, NamedTuple, Optional

MISCELLANEOUS = "MIS"


class CategoryNode(NamedTuple):
    code: str
    parent: Optional[str]
    keyword: str


CATEGORIES: List[CategoryNode] = [
    CategoryNode("FOD", None, "Food"),
    CategoryNode("FOD-REST", "FOD", "Food"),
    CategoryNode("FOD-DEL", "FOD", "Delivery"),
    CategoryNode("FOD-GRO", "FOD", "Grocery"),
    CategoryNode("HOU", None, "Housing"),
    CategoryNode("HOU-RENT", "HOU", "Rent"),
    CategoryNode("HOU-ELC", "HOU", "Electricity"),
    CategoryNode("HOU-WAT", "HOU", "Water"),
    CategoryNode("HOU-GAS", "HOU", "Gas"),
    CategoryNode("HOU-TEL", "HOU", "Internet"),
    CategoryNode("TRN", None, "Transport"),
    CategoryNode("TRN-FUEL", "TRN", "Fuel"),
    CategoryNode("TRN-RIDE", "TRN", "Ride"),
    CategoryNode("TRN-PUB", "TRN", "Travel"),
    CategoryNode("TRN-TOL", "TRN", "Toll"),
    CategoryNode("SHO", None, "Shopping"),
    CategoryNode("SHO-CLO", "SHO", "Clothes"),
    CategoryNode("SHO-ELE", "SHO", "Electronics"),
    CategoryNode("SHO-HOM", "SHO", "Homeware"),
    CategoryNode("HFC", None, "Health"),
    CategoryNode("HFC-MED", "HFC", "Medicine"),
    CategoryNode("HFC-GYM", "HFC", "Gym"),
    CategoryNode("EDU", None, "Education"),
    CategoryNode("EDU-SUB", "EDU", "Education"),
    CategoryNode("ENT", None, "Entertainment"),
    CategoryNode("ENT-SUB", "ENT", "Streaming"),
    CategoryNode("ENT-MOV", "ENT", "Movie"),
    CategoryNode("ENT-VAC", "ENT", "Vacation"),
    CategoryNode("FIN", None, "Finance"),
    CategoryNode("FIN-INS", "FIN", "Insurance"),
    CategoryNode("FIN-INV", "FIN", "Invest"),
    CategoryNode("FIN-LOA", "FIN", "Loan"),
    CategoryNode("FIN-FEE", "FIN", "Fees"),
    CategoryNode("GOV", None, "Government"),
    CategoryNode("GOV-TAX", "GOV", "Tax"),
    CategoryNode("GFT", None, "Gifts"),
    CategoryNode("GFT-DON", "GFT", "Gift"),
    CategoryNode("PER", None, "Personal"),
    CategoryNode("PER-SAL", "PER", "Salon"),
    CategoryNode(MISCELLANEOUS, None, "Misc"),
]


class Taxonomy:
    def __init__(self, nodes: List[CategoryNode]):
        self._nodes: Dict[str, CategoryNode] = {node.code: node for node in nodes}

    def contains(self, code: str) -> bool:
        return code in self._nodes

    def parent(self, code: str) -> Optional[str]:
        node = self._nodes.get(code)
        return node.parent if node else None

    def family(self, code: str) -> List[str]:
        """The code itself followed by every code whose parent it is."""
        return [code] + [n.code for n in self._nodes.values() if n.parent == code]

    def keyword(self, code: str) -> str:
        node = self._nodes.get(code)
        return node.keyword if node else self._nodes[MISCELLANEOUS].keyword


DEFAULT_TAXONOMY = Taxonomy(CATEGORIES)
