"""
Preview Data Model for the Link Preview service.
This is the record every resolution produces, whether the HTML was
fetched from a URL or handed in directly.
"""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class PreviewData(BaseModel):
    """
    Link preview metadata resolved from one HTML document.

    Optional fields are None when no source provided a value. The image
    and favicon lists are always present, deduplicated, and hold only
    syntactically valid absolute URLs.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    description: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    favicons: List[str] = Field(default_factory=list)
    price_amount: Optional[float] = Field(default=None, alias="priceAmount")
    price_currency: Optional[str] = Field(default=None, alias="priceCurrency")
    site_name: Optional[str] = Field(default=None, alias="siteName")

    def get_present_fields(self) -> List[str]:
        """Return list of resolved fields."""
        present = []
        for field_name, value in self:
            if value is None or value == []:
                continue
            present.append(field_name)
        return present

    def get_missing_fields(self) -> List[str]:
        """Return list of fields no source could fill."""
        present = self.get_present_fields()
        return [f for f in type(self).model_fields if f not in present]


class UrlPreviewData(PreviewData):
    """Preview data for a fetched page, with the final URL after redirects."""
    url: str
