from .customer import Customer, CustomerRead
from .counter import Counter
from .identity import Identity
from .campaign import (
    Campaign, CampaignCreate, CampaignUpdate, CampaignRead, CampaignStatus,
    Operator, TargetingRule, HistoryEntry,
)
