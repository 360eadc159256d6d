"""Chart figures handed to the rendering layer."""

from .charts import ViewCharts, allocation_chart, price_chart, risk_chart

__all__ = ["ViewCharts", "allocation_chart", "price_chart", "risk_chart"]
