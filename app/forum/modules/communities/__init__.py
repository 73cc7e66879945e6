"""
Communities module.

Communities are owned by the auth provider (organizations) and mirrored here
by the webhook in `modules.webhooks`; this app never creates them from a form.
"""
