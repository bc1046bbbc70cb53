import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests
import urllib3
from requests.exceptions import ConnectionError, ReadTimeout

from .exceptions import ControllerError, LoginError, ProfileNotFoundError
from .models import PortOverride, PortProfile, RawAlarmRecord, SwitchOverrides

logger = logging.getLogger(__name__)

# disable insecure HTTPS warnings (self-signed controller certs)
urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)


@dataclass
class AlarmFilter:
    limit: int = 3000
    start: int = 0
    within_hours: int = 24


class UniFiClient:
    """Minimal UniFi Network controller client for alarms, port profiles and switch port overrides."""

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        port: int = 8443,
        site: str = "default",
        verify_ssl: bool = True,
        unifi_os: bool = False,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        self.host = host
        self.username = username
        self.password = password
        self.site = site
        self.verify_ssl = verify_ssl
        self.unifi_os = unifi_os
        self.default_timeout = timeout
        self.base_url = f"https://{host}:{port}".rstrip("/")

        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
        )
        self._logged_in = False

        self.logger = logging.getLogger(f"{__name__}.{host}")

    def _api_url(self, endpoint: str) -> str:
        # UniFi OS consoles serve the Network application behind a proxy prefix.
        prefix = "/proxy/network" if self.unifi_os else ""
        return f"{self.base_url}{prefix}{endpoint}"

    def _site_endpoint(self, suffix: str) -> str:
        return f"/api/s/{self.site}/{suffix.lstrip('/')}"

    @staticmethod
    def _unwrap(resp: requests.Response, endpoint: str) -> List[Dict[str, Any]]:
        """Return the ``data`` list of a controller response, raising on ``meta.rc != ok``."""
        try:
            body = resp.json()
        except ValueError as exc:
            raise ControllerError(f"Controller returned non-JSON response for {endpoint}") from exc

        if not isinstance(body, dict):
            raise ControllerError(f"Unexpected controller response for {endpoint}: {body!r}")

        meta = body.get("meta") or {}
        if meta.get("rc", "ok") != "ok":
            raise ControllerError(
                f"Controller rejected request to {endpoint}",
                {"rc": meta.get("rc"), "msg": meta.get("msg")},
            )

        data = body.get("data") or []
        if not isinstance(data, list):
            raise ControllerError(f"Controller response for {endpoint} has no data list")
        return data

    def _get(self, endpoint: str, params: Optional[dict] = None, max_retries: int = 3) -> List[Dict[str, Any]]:
        """GET a site endpoint with retry on timeouts and connection errors."""
        url = self._api_url(endpoint)
        params = params or {}

        for attempt in range(max_retries):
            try:
                resp = self.session.get(
                    url,
                    params=params,
                    verify=self.verify_ssl,
                    timeout=self.default_timeout,
                )
                resp.raise_for_status()
                return self._unwrap(resp, endpoint)
            except (ReadTimeout, ConnectionError) as exc:
                if attempt < max_retries - 1:
                    wait_time = 2 ** attempt
                    self.logger.warning(
                        "%s (attempt %s/%s), retrying in %ss... URL: %s",
                        type(exc).__name__,
                        attempt + 1,
                        max_retries,
                        wait_time,
                        endpoint,
                    )
                    time.sleep(wait_time)
                else:
                    self.logger.error("Failed after %s attempts for %s", max_retries, endpoint)
                    raise ControllerError(f"Controller unreachable: {exc}") from exc
            except requests.RequestException as exc:
                raise ControllerError(f"GET {endpoint} failed: {exc}") from exc
        return []

    def _put(self, endpoint: str, payload: dict) -> List[Dict[str, Any]]:
        """PUT to the controller. Writes are never retried."""
        try:
            resp = self.session.put(
                self._api_url(endpoint),
                json=payload,
                verify=self.verify_ssl,
                timeout=self.default_timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise ControllerError(f"PUT {endpoint} failed: {exc}") from exc
        return self._unwrap(resp, endpoint)

    def login(self) -> None:
        endpoint = "/api/auth/login" if self.unifi_os else "/api/login"
        self.logger.info("Logging in to controller %s as %s", self.base_url, self.username)
        try:
            resp = self.session.post(
                f"{self.base_url}{endpoint}",
                json={"username": self.username, "password": self.password},
                verify=self.verify_ssl,
                timeout=self.default_timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise LoginError(f"Login to {self.base_url} failed: {exc}") from exc

        # UniFi OS expects the CSRF token from the login response on every write.
        csrf = resp.headers.get("X-CSRF-Token")
        if csrf:
            self.session.headers.update({"X-CSRF-Token": csrf})
        self._logged_in = True

    def logout(self) -> None:
        if not self._logged_in:
            return
        endpoint = "/api/auth/logout" if self.unifi_os else "/api/logout"
        try:
            self.session.post(f"{self.base_url}{endpoint}", verify=self.verify_ssl, timeout=self.default_timeout)
        except requests.RequestException as exc:
            self.logger.warning("Logout from %s failed: %s", self.base_url, exc)
        finally:
            self._logged_in = False

    def get_port_profiles(self) -> List[PortProfile]:
        data = self._get(self._site_endpoint("rest/portconf"))
        profiles: List[PortProfile] = []
        for p in data:
            if not isinstance(p, dict):
                self.logger.warning("Skipping malformed port profile entry: %r", p)
                continue
            pid = p.get("_id")
            name = p.get("name")
            if not isinstance(pid, str) or not isinstance(name, str):
                self.logger.warning("Skipping port profile without id/name: %s", p)
                continue
            profiles.append(PortProfile(id=pid, name=name))
        return profiles

    def get_port_profile(self, name: str) -> PortProfile:
        """Look up a port profile by its exact name."""
        for profile in self.get_port_profiles():
            if profile.name == name:
                return profile
        raise ProfileNotFoundError(name)

    def get_raw_alarms(self, alarm_filter: AlarmFilter) -> List[RawAlarmRecord]:
        self.logger.info(
            "Fetching alarms (limit=%s start=%s within=%sh)",
            alarm_filter.limit,
            alarm_filter.start,
            alarm_filter.within_hours,
        )
        data = self._get(
            self._site_endpoint("list/alarm"),
            params={
                "_limit": alarm_filter.limit,
                "_start": alarm_filter.start,
                "within": alarm_filter.within_hours,
            },
        )
        return [RawAlarmRecord(key=str(a.get("key", "")), payload=a) for a in data if isinstance(a, dict)]

    def get_switch(self, name: str) -> Optional[SwitchOverrides]:
        """
        Look up a managed switch by name.

        Returns None if no switch carries the name. Assumes unique switch names;
        the first match is used.
        """
        data = self._get(self._site_endpoint("stat/device"))
        matches = [d for d in data if isinstance(d, dict) and d.get("type") == "usw" and d.get("name") == name]
        if not matches:
            return None
        if len(matches) > 1:
            self.logger.warning("Multiple switches found with name '%s'; using the first.", name)

        device = matches[0]
        device_id = device.get("_id") or device.get("device_id")
        if not isinstance(device_id, str) or not device_id:
            raise ControllerError(f"Controller returned switch {name!r} without device id")

        overrides: List[PortOverride] = []
        for raw in device.get("port_overrides") or []:
            if not isinstance(raw, dict) or "port_idx" not in raw:
                continue
            overrides.append(PortOverride.from_dict(raw))

        return SwitchOverrides(name=name, device_id=device_id, overrides=overrides)

    def set_port_overrides(self, device_id: str, overrides: List[PortOverride]) -> None:
        """Replace the whole port override collection of a switch."""
        self.logger.warning("Writing %s port override(s) to device %s", len(overrides), device_id)
        self._put(
            self._site_endpoint(f"rest/device/{device_id}"),
            {"port_overrides": [o.to_dict() for o in overrides]},
        )
