"""Users app package.

This module initializes the users app: a custom user model with marketplace
roles (client, DJ, admin) and the DJ profile consulted when offering DJs to
clients. Use ``apps.users.models.CustomUser`` as the AUTH_USER_MODEL
throughout the project.
"""
