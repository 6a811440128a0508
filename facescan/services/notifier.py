"""Outbound account emails (verification and password reset)."""
from __future__ import annotations

import html
from typing import Protocol

from facescan.core.mailer import SMTPMailer


class Notifier(Protocol):
    def send_verification(self, email: str, token: str) -> bool: ...

    def send_password_reset(self, email: str, token: str) -> bool: ...


def _layout(heading: str, prompt: str, action_url: str, action_label: str, expiry: str, footer: str) -> str:
    url = html.escape(action_url)
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <div style="background: #14b8a6; padding: 30px; text-align: center;">
        <h1 style="color: white; margin: 0;">facescan&reg;</h1>
      </div>
      <div style="padding: 30px; background: #f9fafb;">
        <h2 style="color: #1f2937;">{heading}</h2>
        <p style="color: #6b7280;">{prompt}</p>
        <p style="text-align: center; margin: 30px 0;">
          <a href="{url}" style="padding: 12px 24px; background-color: #3B82F6; color: white; text-decoration: none; border-radius: 8px;">{action_label}</a>
        </p>
        <p style="color: #6b7280;">Or copy and paste this link in your browser:</p>
        <p style="color: #3b82f6; word-break: break-all;">{url}</p>
        <p style="color: #9ca3af; font-size: 14px;">This link will expire in {expiry}.</p>
      </div>
      <div style="padding: 20px; text-align: center; color: #9ca3af; font-size: 12px;">{footer}</div>
    </div>
    """


def _describe_ttl(seconds: int) -> str:
    if seconds % 3600 == 0:
        hours = seconds // 3600
        return "1 hour" if hours == 1 else f"{hours} hours"
    minutes = max(1, seconds // 60)
    return "1 minute" if minutes == 1 else f"{minutes} minutes"


class EmailNotifier:
    """Renders account emails and hands them to the mailer."""

    def __init__(
        self,
        mailer: SMTPMailer,
        frontend_url: str,
        *,
        verification_ttl_seconds: int = 86400,
        reset_ttl_seconds: int = 3600,
    ) -> None:
        self.mailer = mailer
        self.frontend_url = frontend_url.rstrip("/")
        self.verification_ttl_seconds = verification_ttl_seconds
        self.reset_ttl_seconds = reset_ttl_seconds

    def verification_url(self, token: str) -> str:
        return f"{self.frontend_url}/verify-email?token={token}"

    def reset_url(self, token: str) -> str:
        return f"{self.frontend_url}/reset-password?token={token}"

    def send_verification(self, email: str, token: str) -> bool:
        url = self.verification_url(token)
        expiry = _describe_ttl(self.verification_ttl_seconds)
        body = _layout(
            "Welcome to facescan&reg;!",
            "Thank you for signing up. Please click the button below to verify your email address:",
            url,
            "Verify Email",
            expiry,
            "If you didn't create an account, please ignore this email.",
        )
        text = f"Verify your facescan account: {url}\nThis link will expire in {expiry}."
        return self.mailer.send("Verify Your facescan Account", email, body, text)

    def send_password_reset(self, email: str, token: str) -> bool:
        url = self.reset_url(token)
        expiry = _describe_ttl(self.reset_ttl_seconds)
        body = _layout(
            "Reset Your Password",
            "You requested a password reset. Click the button below to reset your password:",
            url,
            "Reset Password",
            expiry,
            "If you didn't request a password reset, please ignore this email.",
        )
        text = f"Reset your facescan password: {url}\nThis link will expire in {expiry}."
        return self.mailer.send("Reset Your facescan Password", email, body, text)
