class WeightConverter:
    """Utility for converting loads between kg and lb."""

    KG_TO_LB = 2.20462
    UNITS = ("kg", "lb")

    @staticmethod
    def kg_to_lb(kg: float) -> float:
        return round(kg * WeightConverter.KG_TO_LB, 2)

    @staticmethod
    def lb_to_kg(lb: float) -> float:
        return round(lb / WeightConverter.KG_TO_LB, 2)

    @classmethod
    def from_kg(cls, kg: float, unit: str) -> float:
        """Express a stored kilogram load in ``unit``."""
        if unit not in cls.UNITS:
            raise ValueError(f"unknown unit: {unit}")
        return cls.kg_to_lb(kg) if unit == "lb" else round(kg, 2)

    @classmethod
    def to_kg(cls, value: float, unit: str) -> float:
        """Convert a load entered in ``unit`` to kilograms for storage."""
        if unit not in cls.UNITS:
            raise ValueError(f"unknown unit: {unit}")
        return cls.lb_to_kg(value) if unit == "lb" else float(value)
