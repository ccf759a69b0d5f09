from src.models.events import DailyBucket, Event, PurchaseBreakdown, TimeWindow, WebsiteStats  # noqa: F401
