"""
Team Service.

Staff management for an organization: emailed invitations with a one-week
token, their acceptance by a signed-in user, role and campus changes, and
removal from the team. Only callers who can manage users may change the
team; the last Account Owner can neither be removed nor demoted.
"""

from __future__ import annotations

import secrets
from datetime import timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from churchsync.core.database.base import utc_now
from churchsync.core.database.entities.organizations import Invitation, Organization, User
from churchsync.core.database.repositories.organizations import (
    InvitationRepository,
    LocationRepository,
    OrganizationRepository,
    UserRepository,
)
from churchsync.core.errors import BusinessRuleError, NotFoundError, PermissionDeniedError
from churchsync.core.logging_config import get_logger
from churchsync.core.models.domain.enums import InvitationStatus, TeamRole, UserRole
from churchsync.core.models.io.common import ActionResponse
from churchsync.core.models.io.organizations import (
    AcceptedInvitation,
    InvitationCreate,
    InvitationRead,
    TeamMemberUpdate,
    TeamOverview,
    UserRead,
)
from churchsync.core.rate_limit import RateLimitTier
from churchsync.integrations.email import EmailService, staff_invitation_email
from churchsync.server.core.config import settings

from .tenancy import TenantContext

logger = get_logger(__name__)

INVITATION_DAYS = 7
TOKEN_LENGTH = 64
ROLE_LABELS = {TeamRole.admin: "an Admin", TeamRole.member: "a Staff member"}
LAST_OWNER_MESSAGE = "Cannot remove the last Account Owner. Assign another Account Owner first."


def new_invitation_token() -> str:
    return secrets.token_hex(TOKEN_LENGTH // 2)


def accept_url(token: str) -> str:
    return f"{settings.public_base_url}/invite/accept?token={token}"


class TeamService:
    """Invitations and membership of the dashboard team."""

    def __init__(self, session: AsyncSession, email: Optional[EmailService] = None) -> None:
        self.session = session
        self.users = UserRepository(session)
        self.invitations = InvitationRepository(session)
        self.locations = LocationRepository(session)
        self.organizations = OrganizationRepository(session)
        self.email = email or EmailService(session)

    @staticmethod
    def _require_manager(tenant: TenantContext, message: str) -> None:
        if not tenant.scope.can_manage_users:
            raise PermissionDeniedError(message)

    async def _check_location(self, tenant: TenantContext, role: TeamRole, location_id: Optional[str]) -> Optional[str]:
        """Return the campus name of ``location_id``; staff must have one."""
        if location_id is None:
            if role == TeamRole.member:
                raise BusinessRuleError("Staff members must be assigned to a location")
            return None
        location = await self.locations.get_active(location_id, tenant.organization_id)
        if location is None:
            raise BusinessRuleError("Invalid location - location not found or inactive")
        return location.name

    async def _send_invitation(
        self, tenant: TenantContext, invitation: Invitation, location_name: Optional[str]
    ) -> bool:
        rendered = staff_invitation_email(
            church_name=tenant.organization.name,
            inviter_name=tenant.user.name or "A team member",
            role_label=ROLE_LABELS[TeamRole(invitation.role)],
            accept_url=accept_url(invitation.token),
            expires_in_days=INVITATION_DAYS,
            location_name=location_name,
        )
        result = await self.email.send(
            to=invitation.email,
            subject=rendered.subject,
            html=rendered.html,
            text=rendered.text,
            organization_id=tenant.organization_id,
            metadata={"template": "staff_invitation", "invitation_id": invitation.id},
        )
        if not result.success:
            logger.warning(f"Invitation email for {invitation.id} was not delivered: {result.error}")
        return result.success

    async def get_team(self, tenant: TenantContext) -> ActionResponse[TeamOverview]:
        members = await self.users.list_for_organization(tenant.organization_id)
        invitations = await self.invitations.list_pending(tenant.organization_id)
        overview = TeamOverview(
            members=[UserRead.model_validate(user) for user in members],
            invitations=[InvitationRead.model_validate(invitation) for invitation in invitations],
        )
        return ActionResponse(data=overview)

    async def invite_staff(self, tenant: TenantContext, payload: InvitationCreate) -> ActionResponse[InvitationRead]:
        """
        Invite someone to join the team and email them the acceptance link.

        Args:
            tenant: Resolved request tenant (user managers only)
            payload: Email, offered role and campus

        Returns:
            ActionResponse with the pending invitation. The invitation is
            kept when the email cannot be sent, so it can be resent.

        Raises:
            PermissionDeniedError: The caller cannot manage users.
            BusinessRuleError: The person is already on the team or invited,
                or the campus is missing or inactive.
        """
        self._require_manager(tenant, "You don't have permission to invite team members")
        tenant.rate_limit(
            "invite_staff", RateLimitTier.CRITICAL, message="Too many invitations. Please wait before sending more."
        )

        email = payload.email
        if await self.users.find_in_organization_by_email(tenant.organization_id, email) is not None:
            raise BusinessRuleError("This user is already a member of your organization")
        if await self.invitations.find_pending(tenant.organization_id, email) is not None:
            raise BusinessRuleError(
                "An invitation for this email is already pending. Please revoke the existing invitation first."
            )
        location_name = await self._check_location(tenant, payload.role, payload.location_id)

        invitation = await self.invitations.create(
            Invitation(
                organization_id=tenant.organization_id,
                email=email,
                role=payload.role,
                location_id=payload.location_id,
                token=new_invitation_token(),
                expires_at=utc_now() + timedelta(days=INVITATION_DAYS),
                invited_by=tenant.user_id,
            )
        )
        invitation_read = InvitationRead.model_validate(invitation)
        logger.info(f"Invitation {invitation.id} created in organization {tenant.organization_id}")

        if await self._send_invitation(tenant, invitation, location_name):
            message = f"Invitation sent to {email}"
        else:
            message = f"Invitation created for {email}, but the email could not be sent. Try resending it."
        return ActionResponse(message=message, data=invitation_read)

    async def resend_invitation(self, tenant: TenantContext, invitation_id: str) -> ActionResponse[InvitationRead]:
        """Issue a fresh token and expiry, reopen an expired invitation and email it again."""
        self._require_manager(tenant, "You don't have permission to resend invitations")
        tenant.rate_limit("resend_invitation", RateLimitTier.STANDARD)

        invitation = await self.invitations.get_in_organization(invitation_id, tenant.organization_id)
        if invitation is None:
            raise NotFoundError("Invitation not found")
        if invitation.status == InvitationStatus.ACCEPTED:
            raise BusinessRuleError("Cannot resend an invitation that has been accepted")

        invitation.token = new_invitation_token()
        invitation.expires_at = utc_now() + timedelta(days=INVITATION_DAYS)
        invitation.status = InvitationStatus.PENDING
        invitation = await self.invitations.update(invitation)
        invitation_read = InvitationRead.model_validate(invitation)

        location_name = None
        if invitation.location_id:
            location = await self.locations.get_by_id(invitation.location_id)
            location_name = location.name if location else None

        if not await self._send_invitation(tenant, invitation, location_name):
            raise BusinessRuleError("Failed to resend invitation. Please try again.")
        return ActionResponse(message=f"Invitation resent to {invitation_read.email}", data=invitation_read)

    async def revoke_invitation(self, tenant: TenantContext, invitation_id: str) -> ActionResponse[InvitationRead]:
        self._require_manager(tenant, "You don't have permission to revoke invitations")
        tenant.rate_limit("revoke_invitation", RateLimitTier.STANDARD)

        invitation = await self.invitations.get_in_organization(invitation_id, tenant.organization_id)
        if invitation is None:
            raise NotFoundError("Invitation not found")
        if invitation.status == InvitationStatus.EXPIRED:
            raise BusinessRuleError("This invitation has already been revoked")
        if invitation.status == InvitationStatus.ACCEPTED:
            raise BusinessRuleError("Cannot revoke an invitation that has been accepted")

        invitation.status = InvitationStatus.EXPIRED
        invitation = await self.invitations.update(invitation)
        logger.info(f"Invitation {invitation.id} revoked by {tenant.user_id}")
        return ActionResponse(
            message=f"Invitation to {invitation.email} has been revoked", data=InvitationRead.model_validate(invitation)
        )

    async def accept_invitation(self, user_id: Optional[str], token: str) -> ActionResponse[AcceptedInvitation]:
        """
        Join the inviting organization with the invited role and campus.

        Args:
            user_id: Signed-in caller from the identity header
            token: Invitation token from the emailed link

        Returns:
            ActionResponse with the organization slug and dashboard URL

        Raises:
            BusinessRuleError: Malformed, used, declined or expired token, or
                a caller who already belongs to another organization.
            PermissionDeniedError: No caller, or the caller's email differs
                from the invited one.
            NotFoundError: Unknown or revoked token.
        """
        if not token or len(token) != TOKEN_LENGTH:
            raise BusinessRuleError("Invalid invitation token")
        user = await self.users.get_by_id(user_id) if user_id else None
        if user is None:
            raise PermissionDeniedError("You must be signed in to accept this invitation")

        invitation = await self.invitations.get_by_token(token)
        if invitation is None:
            raise NotFoundError("Invitation not found or has been revoked")
        if invitation.status == InvitationStatus.ACCEPTED:
            raise BusinessRuleError("This invitation has already been accepted")
        if invitation.status == InvitationStatus.DECLINED:
            raise BusinessRuleError("This invitation has been declined")
        expired_message = "This invitation has expired. Please request a new invitation."
        if invitation.status == InvitationStatus.EXPIRED:
            raise BusinessRuleError(expired_message)
        if utc_now() > invitation.expires_at:
            invitation.status = InvitationStatus.EXPIRED
            await self.invitations.update(invitation)
            raise BusinessRuleError(expired_message)
        if user.email.lower() != invitation.email.lower():
            raise PermissionDeniedError(
                f"This invitation was sent to {invitation.email}. Please sign in with that email address."
            )

        organization: Optional[Organization] = await self.organizations.get_by_id(invitation.organization_id)
        if organization is None:
            raise NotFoundError("Organization not found")
        accepted = AcceptedInvitation(
            organization_slug=organization.slug, redirect_url=f"/church/{organization.slug}/admin"
        )

        if user.organization_id == invitation.organization_id:
            message = "You are already a member of this organization"
        elif user.organization_id is not None or user.role == UserRole.platform_admin:
            raise BusinessRuleError("Your account already belongs to another organization")
        else:
            role = TeamRole(invitation.role)
            user.organization_id = invitation.organization_id
            user.role = role.user_role
            user.default_location_id = invitation.location_id
            user.can_see_all_locations = role == TeamRole.admin and invitation.location_id is None
            self.session.add(user)
            message = f"Welcome to {organization.name}!"

        invitation.status = InvitationStatus.ACCEPTED
        invitation.accepted_at = utc_now()
        self.session.add(invitation)
        await self.session.commit()
        logger.info(f"Invitation {invitation.id} accepted by user {user.id}")
        return ActionResponse(message=message, data=accepted)

    async def _get_member(self, tenant: TenantContext, member_id: str, platform_message: str) -> User:
        user = await self.users.get_in_organization(member_id, tenant.organization_id)
        if user is None:
            raise NotFoundError("Team member not found")
        if user.role == UserRole.platform_admin:
            raise BusinessRuleError(platform_message)
        return user

    async def _is_last_owner(self, tenant: TenantContext, user: User) -> bool:
        if user.role != UserRole.church_owner:
            return False
        return await self.users.count_with_role(tenant.organization_id, UserRole.church_owner) <= 1

    async def update_member(
        self, tenant: TenantContext, member_id: str, payload: TeamMemberUpdate
    ) -> ActionResponse[UserRead]:
        """Change a team member's role and campus."""
        self._require_manager(tenant, "You don't have permission to update team members")
        tenant.rate_limit("update_team_member", RateLimitTier.STANDARD)

        user = await self._get_member(tenant, member_id, "Cannot modify platform administrators")
        if user.id == tenant.user_id and payload.role == TeamRole.member:
            raise BusinessRuleError("You cannot change your own role to Staff")
        if await self._is_last_owner(tenant, user):
            raise BusinessRuleError(
                "Cannot change the role of the last Account Owner. Assign another Account Owner first."
            )
        await self._check_location(tenant, payload.role, payload.location_id)

        user.role = payload.role.user_role
        user.default_location_id = payload.location_id
        user.can_see_all_locations = payload.role == TeamRole.admin and payload.location_id is None
        user = await self.users.update(user)
        logger.info(f"Team member {user.id} updated to {user.role} by {tenant.user_id}")
        return ActionResponse(message=f"{user.name} has been updated successfully", data=UserRead.model_validate(user))

    async def remove_member(self, tenant: TenantContext, member_id: str) -> ActionResponse[None]:
        """Detach a user from the organization. The account itself is kept."""
        self._require_manager(tenant, "You don't have permission to perform this action")
        tenant.rate_limit("remove_team_member", RateLimitTier.STANDARD)

        user = await self._get_member(tenant, member_id, "Cannot remove platform administrators")
        if user.id == tenant.user_id:
            raise BusinessRuleError("You cannot remove yourself from the team")
        if await self._is_last_owner(tenant, user):
            raise BusinessRuleError(LAST_OWNER_MESSAGE)

        name = user.name
        user.organization_id = None
        user.role = UserRole.user
        user.default_location_id = None
        user.can_see_all_locations = False
        await self.users.update(user)
        logger.info(f"User {member_id} removed from organization {tenant.organization_id} by {tenant.user_id}")
        return ActionResponse(message=f"{name} has been removed from the team")
