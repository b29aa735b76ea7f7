from typing import Any, Dict
import json
from pydantic import BaseModel, ConfigDict

class BaseSchema(BaseModel):
	"""
	Base schema class for every API and service level model.
	"""

	model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

	def to_dict(self) -> Dict[str, Any]:
		"""Convert model to a JSON compatible dictionary."""
		return json.loads(self.model_dump_json())
