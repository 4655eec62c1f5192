CREATE_INVITATION_URL = "/api/v1/invitations"
GET_SNAPSHOT_URL = "/api/v1/invitations/{invitation_id}"
SUBMIT_RESPONSE_URL = "/api/v1/invitations/{invitation_id}/responses"
RECORD_VIEW_URL = "/api/v1/invitations/{invitation_id}/views"
REFRESH_INVITATION_URL = "/api/v1/invitations/{invitation_id}/refresh"
EXPORT_TABLES_URL = "/api/v1/export"
