from pydantic import BaseModel, ConfigDict, ValidationError
from typing import Any, Dict, Optional


class BaseGolfModel(BaseModel):
    """Shared configuration and correction helpers."""
    model_config = ConfigDict(validate_assignment=True)

    def update_field(self, field_name: str, value: Any) -> Optional[str]:
        """Update a field with user input. Returns error message if validation fails."""
        try:
            setattr(self, field_name, value)
            return None
        except ValidationError as e:
            return e.errors()[0]['msg']

    def update_fields(self, **values: Any) -> Dict[str, str]:
        """Apply several edits; returns {field: message} for the ones rejected."""
        errors: Dict[str, str] = {}
        for field_name, value in values.items():
            message = self.update_field(field_name, value)
            if message is not None:
                errors[field_name] = message
        return errors
