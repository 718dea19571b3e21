"""Reference data every tenant (or the whole installation) starts with."""

OWNER_ROLE = {
    "name": "Owner",
    "level": 1,
    "description": "Tenant owner with full access",
}

# Shared across tenants (tenant_id is null); lower level = more senior.
DEFAULT_GLOBAL_ROLES = [
    {"name": "Admin", "level": 1, "description": "System administrator"},
    {"name": "Manager", "level": 2, "description": "Team manager"},
    {"name": "Member", "level": 3, "description": "Regular member"},
    {"name": "Viewer", "level": 4, "description": "Read-only access"},
]

DEFAULT_PERMISSIONS = [
    {"name": "view_contacts", "description": "View contacts", "module": "crm"},
    {"name": "create_contacts", "description": "Create contacts", "module": "crm"},
    {"name": "edit_contacts", "description": "Edit contacts", "module": "crm"},
    {"name": "delete_contacts", "description": "Delete contacts", "module": "crm"},
    {"name": "view_leads", "description": "View leads", "module": "crm"},
    {"name": "create_leads", "description": "Create leads", "module": "crm"},
    {"name": "edit_leads", "description": "Edit leads", "module": "crm"},
    {"name": "delete_leads", "description": "Delete leads", "module": "crm"},
    {"name": "view_deals", "description": "View deals", "module": "crm"},
    {"name": "create_deals", "description": "Create deals", "module": "crm"},
    {"name": "edit_deals", "description": "Edit deals", "module": "crm"},
    {"name": "delete_deals", "description": "Delete deals", "module": "crm"},
    {"name": "view_companies", "description": "View companies", "module": "crm"},
    {"name": "create_companies", "description": "Create companies", "module": "crm"},
    {"name": "edit_companies", "description": "Edit companies", "module": "crm"},
    {"name": "delete_companies", "description": "Delete companies", "module": "crm"},
    {"name": "view_products", "description": "View products", "module": "crm"},
    {"name": "manage_products", "description": "Manage products", "module": "crm"},
    {"name": "view_reports", "description": "View reports", "module": "crm"},
    {"name": "manage_users", "description": "Manage tenant users", "module": "tenant"},
    {"name": "manage_roles", "description": "Manage roles", "module": "tenant"},
    {"name": "manage_settings", "description": "Manage tenant settings", "module": "tenant"},
]

DEFAULT_PIPELINE = {
    "title": "Default Sales Pipeline",
    "description": "Main sales pipeline",
}

# Order matters: position in this list becomes SalesStage.order (1-based).
DEFAULT_SALES_STAGES = [
    {"title": "Research/Discovery", "description": "Initial research phase"},
    {"title": "Initial Contact", "description": "First contact with lead"},
    {"title": "Qualification", "description": "Qualify the lead"},
    {"title": "Presentation", "description": "Present solution"},
    {"title": "Negotiation", "description": "Negotiate terms"},
    {"title": "Contract Accepted", "description": "Contract signed"},
    {"title": "Closed Won", "description": "Deal won"},
    {"title": "Closed Lost", "description": "Deal lost"},
]

DEFAULT_INTEREST_LEVELS = [
    {"level": "Hot", "description": "High interest", "color": "#ef4444"},
    {"level": "Warm", "description": "Medium interest", "color": "#f97316"},
    {"level": "Cold", "description": "Low interest", "color": "#3b82f6"},
]

DEFAULT_ACTIVITY_TYPES = [
    {"type_name": "Call", "description": "Phone call activity"},
    {"type_name": "Email", "description": "Email correspondence"},
    {"type_name": "Meeting", "description": "In-person or virtual meeting"},
    {"type_name": "Task", "description": "General task"},
]

DEFAULT_LEAD_SOURCES = [
    {"source_name": "Facebook", "category": "Social Media", "description": "Leads from Facebook ads and organic posts"},
    {"source_name": "Instagram", "category": "Social Media", "description": "Leads from Instagram ads and stories"},
    {"source_name": "Twitter", "category": "Social Media", "description": "Leads from Twitter/X posts and ads"},
    {"source_name": "YouTube", "category": "Social Media", "description": "Leads from YouTube video marketing"},
    {"source_name": "LinkedIn", "category": "Social Media", "description": "Professional network leads"},
    {"source_name": "Landing Page", "category": "Digital Marketing", "description": "Website landing page inquiries"},
    {"source_name": "Google Ads", "category": "Digital Marketing", "description": "Google search and display ads"},
    {"source_name": "Email Campaign", "category": "Digital Marketing", "description": "Email marketing campaigns"},
    {"source_name": "SEO/Organic", "category": "Digital Marketing", "description": "Organic search traffic"},
    {"source_name": "Property Portal", "category": "Digital Marketing", "description": "Listings on property websites"},
    {"source_name": "Realtor Referral", "category": "Referrals", "description": "Referrals from other real estate agents"},
    {"source_name": "Client Referral", "category": "Referrals", "description": "Referrals from existing clients"},
    {"source_name": "Partner Referral", "category": "Referrals", "description": "Business partner referrals"},
    {"source_name": "Walk-in", "category": "Offline", "description": "Direct office walk-ins"},
    {"source_name": "Phone Inquiry", "category": "Offline", "description": "Direct phone calls"},
    {"source_name": "Open House", "category": "Offline", "description": "Open house events"},
    {"source_name": "Billboard/Print", "category": "Offline", "description": "Traditional advertising"},
    {"source_name": "Property Exhibition", "category": "Events", "description": "Real estate exhibitions and shows"},
    {"source_name": "Webinar", "category": "Events", "description": "Online property webinars"},
    {"source_name": "Community Event", "category": "Events", "description": "Local community events"},
]

DEFAULT_PRODUCT_TYPES = [
    {"name": "Studio", "description": "Studio apartment - open living space"},
    {"name": "One Bedroom", "description": "1 bedroom configuration"},
    {"name": "Two Bedroom", "description": "2 bedroom configuration"},
    {"name": "Three Bedroom", "description": "3 bedroom configuration"},
    {"name": "Four Bedroom", "description": "4 bedroom configuration"},
    {"name": "Penthouse", "description": "Luxury penthouse unit"},
    {"name": "Duplex", "description": "Two-floor unit"},
    {"name": "Loft", "description": "Open-plan loft space"},
]

DEFAULT_PRODUCT_CATEGORIES = [
    {"name": "Apartment", "description": "Residential apartment units", "color": "#3B82F6"},
    {"name": "Villa", "description": "Standalone villa properties", "color": "#10B981"},
    {"name": "Townhouse", "description": "Townhouse properties", "color": "#F59E0B"},
    {"name": "Office Space", "description": "Commercial office spaces", "color": "#8B5CF6"},
    {"name": "Retail Space", "description": "Commercial retail units", "color": "#EF4444"},
    {"name": "Warehouse", "description": "Industrial warehouse spaces", "color": "#6B7280"},
    {"name": "Land Plot", "description": "Vacant land for development", "color": "#059669"},
    {"name": "Building", "description": "Entire building for sale/rent", "color": "#DC2626"},
]
