"""
Scraper Pydantic Schemas

Request/response models for the scraping and LinkedIn session endpoints.
"""

from typing import Optional, List, Any

from pydantic import BaseModel, Field, ConfigDict


class ScrapeRequest(BaseModel):
    """Schema for a scrape request."""

    url: str = Field(..., min_length=1, max_length=2000, description="Job posting URL")


class JobPostingData(BaseModel):
    """Fields extracted from a job posting."""

    job_title: str = Field("", description="Job title")
    company_name: str = Field("", description="Company name")
    salary_range: Optional[str] = Field(None, description="Salary text as shown on the page")
    salary_min: Optional[int] = Field(None, ge=0, description="Annualized minimum salary")
    salary_max: Optional[int] = Field(None, ge=0, description="Annualized maximum salary")
    experience_level: Optional[str] = Field(None, description="Senior, Mid-Level or Entry Level")
    aligned_sector: List[str] = Field(default_factory=lambda: ["Other"], description="Sector tags")


class ScrapeResponse(BaseModel):
    """Schema for a scrape result."""

    success: bool
    data: Optional[JobPostingData] = None
    source: Optional[str] = Field(None, description="Site recipe that handled the URL")
    error: Optional[str] = Field(None, description="User-facing failure message")


class CookieUploadRequest(BaseModel):
    """
    Schema for a cookie export upload.

    ``cookies`` is left loose so malformed exports reach the session store's
    validation and get its message back.
    """

    model_config = ConfigDict(populate_by_name=True)

    cookies: Any = Field(None, description="Cookie objects exported from a logged-in browser")
    user_agent: Optional[str] = Field(None, alias="userAgent", description="User agent the cookies were issued to")
    platform: Optional[str] = Field(None, description="navigator.platform of that browser")


class CookieUploadResponse(BaseModel):
    """Schema for a successful cookie upload."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    cookie_count: int = Field(..., alias="cookieCount")


class AuthStatusResponse(BaseModel):
    """Schema for LinkedIn session status."""

    model_config = ConfigDict(populate_by_name=True)

    authenticated: bool
    message: str
    cookie_count: Optional[int] = Field(None, alias="cookieCount")
    saved_at: Optional[str] = Field(None, alias="savedAt")


class ClearSessionResponse(BaseModel):
    """Schema for a session clear."""

    success: bool
    message: str


class InteractiveLoginResponse(BaseModel):
    """Schema for the interactive login outcome."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: Optional[str] = None
    cookie_count: Optional[int] = Field(None, alias="cookieCount")
    error: Optional[str] = None
