"""
Legal documents (terms, privacy) served by the utilities API.
"""

from typing import Optional

from safal_auth.models.envelope import WireModel

TERMS_AND_CONDITIONS = "TermsAndConditions"
PRIVACY_POLICY = "PrivacyPolicy"


class PolicyApplication(WireModel):
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    app_code: Optional[str] = None
    status: Optional[str] = None


class PolicyDocument(WireModel):
    id: Optional[str] = None
    type: Optional[str] = None
    name: Optional[str] = None
    version: Optional[str] = None
    content: Optional[str] = None
    pdf_link: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    application: Optional[PolicyApplication] = None
