from .client import AnthropicGateway
from .pricing import calculate_cost

__all__ = ["AnthropicGateway", "calculate_cost"]
