from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import date, datetime
from transport_admin.models.shared.enums import MediaType, PreCheckState, SessionType

# Checklist items grouped the way drivers see them on the form
CHECKLIST_SECTIONS: Dict[str, Dict[str, str]] = {
    "Vehicle Exterior": {
        "lights_working": "Lights working (headlights, indicators, brake lights)",
        "mirrors_adjusted": "Mirrors properly adjusted",
        "tires_condition": "Tires in good condition (tread, pressure)",
        "body_damage": "No body damage (confirmed)",
        "windows_clean": "Windows clean and clear",
    },
    "Vehicle Interior": {
        "dashboard_lights": "Dashboard warning lights checked",
        "horn_working": "Horn working",
        "wipers_working": "Wipers working properly",
        "seatbelts_working": "All seatbelts functional",
        "interior_clean": "Interior clean and tidy",
    },
    "Safety Equipment": {
        "first_aid_kit": "First aid kit present",
        "fire_extinguisher": "Fire extinguisher present",
        "warning_triangle": "Warning triangle present",
        "emergency_kit": "Emergency kit complete",
    },
    "Mechanical Checks": {
        "engine_oil_level": "Engine oil level adequate",
        "coolant_level": "Coolant level adequate",
        "brake_fluid": "Brake fluid level adequate",
        "fuel_level_adequate": "Fuel level adequate",
    },
}

CHECKLIST_LABELS: Dict[str, str] = {
    field: label for section in CHECKLIST_SECTIONS.values() for field, label in section.items()
}
CHECKLIST_FIELDS = tuple(CHECKLIST_LABELS)


class MediaUrl(BaseModel):
    type: MediaType
    url: str


class VehiclePreCheckData(BaseModel):
    """Finalized pre-check handed from the form to the orchestrator"""
    lights_working: bool
    mirrors_adjusted: bool
    tires_condition: bool
    body_damage: bool
    windows_clean: bool
    dashboard_lights: bool
    horn_working: bool
    wipers_working: bool
    seatbelts_working: bool
    interior_clean: bool
    first_aid_kit: bool
    fire_extinguisher: bool
    warning_triangle: bool
    emergency_kit: bool
    engine_oil_level: bool
    coolant_level: bool
    brake_fluid: bool
    fuel_level_adequate: bool
    notes: str = ""
    issues_found: str = ""
    media_urls: Optional[List[MediaUrl]] = None

    def checklist(self) -> Dict[str, bool]:
        return {field: getattr(self, field) for field in CHECKLIST_FIELDS}


class ToggleCheckRequest(BaseModel):
    field: str


class PreCheckNotesUpdate(BaseModel):
    notes: Optional[str] = Field(None, max_length=5000)
    issues_found: Optional[str] = Field(None, max_length=5000)


class MediaItemView(BaseModel):
    index: int
    id: str
    type: MediaType
    filename: str
    size: int
    preview_url: Optional[str] = None


class PreCheckFormView(BaseModel):
    state: PreCheckState
    session_type: SessionType
    vehicle_id: Optional[int] = None
    checks: Dict[str, bool]
    all_checks_complete: bool
    notes: str
    issues_found: str
    media: List[MediaItemView]
    recording: bool


class VehiclePreCheckResponse(BaseModel):
    id: int
    route_session_id: Optional[int] = None
    driver_id: int
    driver_name: Optional[str] = None
    vehicle_id: Optional[int] = None
    vehicle_registration: Optional[str] = None
    route_number: Optional[str] = None
    session_type: SessionType
    check_date: date
    completed_at: Optional[datetime] = None
    checks: Dict[str, bool]
    all_passed: bool
    failed_items: List[str]
    notes: Optional[str] = None
    issues_found: Optional[str] = None
    media_urls: Optional[List[MediaUrl]] = None
