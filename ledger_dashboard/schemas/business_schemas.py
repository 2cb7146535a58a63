from pydantic import BaseModel


class BusinessSummary(BaseModel):
    """Business fields shown in the business switcher"""

    model_config = {"from_attributes": True, "frozen": True}

    id: str
    name: str
    legal_name: str | None = None
    industry: str | None = None
    currency: str = "USD"


class BusinessMembership(BaseModel):
    """One user's access to one business"""

    model_config = {"from_attributes": True, "frozen": True}

    business_id: str
    role: str
    business: BusinessSummary

    @property
    def id(self) -> str:
        """Id of the business this membership grants access to"""
        return self.business_id
