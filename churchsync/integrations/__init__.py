"""
Outbound integrations: email delivery, file storage and the GoHighLevel CRM.
"""
