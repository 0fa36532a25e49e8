"""
System preferences — ``defaults write`` for a fixed list of settings.

Each entry is one (domain, key, type, value) write; nothing here
interprets the values. ``{home}`` in a value expands to the run's home.
Entries flagged ``current_host`` are written with ``-currentHost``.

After the built-in list, an optional ``macos_defaults.sh`` in the working
directory is run for anything that needs more than a plain write
(sudo, scutil, firewall).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from macprov.adapters.shell.filesystem import ensure_directory
from macprov.core.context import RunContext
from macprov.core.models.action import Receipt
from macprov.core.models.stage import StageResult

logger = logging.getLogger(__name__)

STEP = "preferences"


@dataclass(frozen=True)
class Preference:
    domain: str
    key: str
    type: str           # bool, int, float, string
    value: str
    current_host: bool = False

    def command(self, home: str) -> list[str]:
        args = ["defaults"]
        if self.current_host:
            args.append("-currentHost")
        args += ["write", self.domain, self.key, f"-{self.type}", self.value.format(home=home)]
        return args


_G = "NSGlobalDomain"
_FINDER = "com.apple.finder"
_DOCK = "com.apple.dock"
_TRACKPAD = "com.apple.driver.AppleBluetoothMultitouch.trackpad"
_SAFARI = "com.apple.Safari"

DEFAULT_PREFERENCES: tuple[Preference, ...] = (
    # General UI/UX
    Preference(_G, "NSTableViewDefaultSizeMode", "int", "2"),
    Preference(_G, "NSWindowResizeTime", "float", "0.001"),
    Preference(_G, "NSNavPanelExpandedStateForSaveMode", "bool", "true"),
    Preference(_G, "NSNavPanelExpandedStateForSaveMode2", "bool", "true"),
    Preference(_G, "PMPrintingExpandedStateForPrint", "bool", "true"),
    Preference(_G, "PMPrintingExpandedStateForPrint2", "bool", "true"),
    Preference(_G, "NSDisableAutomaticTermination", "bool", "true"),
    Preference("com.apple.helpviewer", "DevMode", "bool", "true"),
    Preference("com.apple.LaunchServices", "LSQuarantine", "bool", "false"),
    Preference("com.apple.menuextra.battery", "ShowPercent", "bool", "true"),
    # Finder
    Preference(_FINDER, "NewWindowTarget", "string", "PfLo"),
    Preference(_FINDER, "NewWindowTargetPath", "string", "file://{home}/"),
    Preference(_FINDER, "ShowExternalHardDrivesOnDesktop", "bool", "true"),
    Preference(_FINDER, "ShowHardDrivesOnDesktop", "bool", "false"),
    Preference(_FINDER, "ShowMountedServersOnDesktop", "bool", "true"),
    Preference(_FINDER, "ShowRemovableMediaOnDesktop", "bool", "true"),
    Preference(_FINDER, "AppleShowAllFiles", "bool", "true"),
    Preference(_G, "AppleShowAllExtensions", "bool", "true"),
    Preference(_FINDER, "ShowStatusBar", "bool", "true"),
    Preference(_FINDER, "ShowPathbar", "bool", "true"),
    Preference(_FINDER, "_FXShowPosixPathInTitle", "bool", "true"),
    Preference(_FINDER, "_FXSortFoldersFirst", "bool", "true"),
    Preference(_FINDER, "FXDefaultSearchScope", "string", "SCcf"),
    Preference(_FINDER, "FXEnableExtensionChangeWarning", "bool", "false"),
    Preference(_G, "com.apple.springing.enabled", "bool", "true"),
    Preference(_G, "com.apple.springing.delay", "float", "0"),
    Preference("com.apple.desktopservices", "DSDontWriteNetworkStores", "bool", "true"),
    Preference("com.apple.desktopservices", "DSDontWriteUSBStores", "bool", "true"),
    Preference(_FINDER, "FXPreferredViewStyle", "string", "Nlsv"),
    Preference(_FINDER, "WarnOnEmptyTrash", "bool", "false"),
    # Dock & Mission Control
    Preference(_DOCK, "tilesize", "int", "48"),
    Preference(_DOCK, "mineffect", "string", "scale"),
    Preference(_DOCK, "minimize-to-application", "bool", "true"),
    Preference(_DOCK, "enable-spring-load-actions-on-all-items", "bool", "true"),
    Preference(_DOCK, "show-process-indicators", "bool", "true"),
    Preference(_DOCK, "launchanim", "bool", "false"),
    Preference(_DOCK, "expose-animation-duration", "float", "0.1"),
    Preference(_DOCK, "expose-group-by-app", "bool", "false"),
    Preference(_DOCK, "autohide-delay", "float", "0"),
    Preference(_DOCK, "autohide-time-modifier", "float", "0.5"),
    Preference(_DOCK, "autohide", "bool", "true"),
    Preference(_DOCK, "showhidden", "bool", "true"),
    Preference(_DOCK, "show-recents", "bool", "false"),
    # Screenshots (location is written after the directory exists)
    Preference("com.apple.screencapture", "type", "string", "png"),
    Preference("com.apple.screencapture", "disable-shadow", "bool", "true"),
    Preference(_G, "AppleFontSmoothing", "int", "1"),
    # Sound
    Preference(_G, "com.apple.sound.uiaudio.enabled", "int", "0"),
    # Keyboard & input
    Preference(_G, "KeyRepeat", "int", "1"),
    Preference(_G, "InitialKeyRepeat", "int", "10"),
    Preference(_G, "NSAutomaticCapitalizationEnabled", "bool", "false"),
    Preference(_G, "NSAutomaticDashSubstitutionEnabled", "bool", "false"),
    Preference(_G, "NSAutomaticPeriodSubstitutionEnabled", "bool", "false"),
    Preference(_G, "NSAutomaticQuoteSubstitutionEnabled", "bool", "false"),
    Preference(_G, "NSAutomaticSpellingCorrectionEnabled", "bool", "false"),
    # Trackpad & mouse
    Preference(_TRACKPAD, "Clicking", "bool", "true"),
    Preference(_G, "com.apple.mouse.tapBehavior", "int", "1", current_host=True),
    Preference(_G, "com.apple.mouse.tapBehavior", "int", "1"),
    Preference(_TRACKPAD, "TrackpadCornerSecondaryClick", "int", "2"),
    Preference(_TRACKPAD, "TrackpadRightClick", "bool", "true"),
    Preference(_G, "com.apple.trackpad.trackpadCornerClickBehavior", "int", "1", current_host=True),
    Preference(_G, "com.apple.trackpad.enableSecondaryClick", "bool", "true", current_host=True),
    Preference("com.apple.BluetoothAudioAgent", "Apple Bitpool Min (editable)", "int", "40"),
    # Safari & WebKit
    Preference(_SAFARI, "UniversalSearchEnabled", "bool", "false"),
    Preference(_SAFARI, "SuppressSearchSuggestions", "bool", "true"),
    Preference(_SAFARI, "ShowFullURLInSmartSearchField", "bool", "true"),
    Preference(_SAFARI, "HomePage", "string", "about:blank"),
    Preference(_SAFARI, "AutoOpenSafeDownloads", "bool", "false"),
    Preference(_SAFARI, "ShowFavoritesBar", "bool", "false"),
    Preference(_SAFARI, "IncludeInternalDebugMenu", "bool", "true"),
    Preference(_SAFARI, "IncludeDevelopMenu", "bool", "true"),
    Preference(_SAFARI, "WebKitDeveloperExtrasEnabledPreferenceKey", "bool", "true"),
    Preference(
        _SAFARI,
        "com.apple.Safari.ContentPageGroupIdentifier.WebKit2DeveloperExtrasEnabled",
        "bool",
        "true",
    ),
    Preference(_G, "WebKitDeveloperExtras", "bool", "true"),
    # Mail
    Preference("com.apple.mail", "DisableReplyAnimations", "bool", "true"),
    Preference("com.apple.mail", "DisableSendAnimations", "bool", "true"),
    Preference("com.apple.mail", "AddressesIncludeNameOnPasteboard", "bool", "false"),
    # Activity Monitor
    Preference("com.apple.ActivityMonitor", "OpenMainWindow", "bool", "true"),
    Preference("com.apple.ActivityMonitor", "IconType", "int", "5"),
    Preference("com.apple.ActivityMonitor", "ShowCategory", "int", "0"),
    Preference("com.apple.ActivityMonitor", "SortColumn", "string", "CPUUsage"),
    Preference("com.apple.ActivityMonitor", "SortDirection", "int", "0"),
    # Security & privacy
    Preference("com.apple.screensaver", "askForPassword", "int", "1"),
    Preference("com.apple.screensaver", "askForPasswordDelay", "int", "0"),
    # Time Machine
    Preference("com.apple.TimeMachine", "DoNotOfferNewDisksForBackup", "bool", "true"),
)


def write_preference(ctx: RunContext, pref: Preference) -> bool:
    result = ctx.run(*pref.command(str(ctx.home)))
    if not result.ok:
        logger.warning(
            "defaults write %s %s failed: %s",
            pref.domain,
            pref.key,
            result.describe_failure(),
        )
    return result.ok


def apply_preferences(
    ctx: RunContext,
    preferences: tuple[Preference, ...] = DEFAULT_PREFERENCES,
) -> StageResult:
    result = StageResult(name=STEP)
    settings = ctx.config.preferences

    if not settings.enabled:
        result.add(Receipt.skip(step=STEP, action="defaults", reason="Preference changes disabled"))
        return result

    # System Settings rewrites some domains on quit; close it first
    ctx.run("osascript", "-e", 'tell application "System Settings" to quit')

    screenshots = ctx.home_path(settings.screenshots_dir)
    result.add(ensure_directory(screenshots, step=STEP, action="screenshots-dir"))
    to_apply = preferences + (
        Preference("com.apple.screencapture", "location", "string", str(screenshots)),
    )

    failures = [f"{p.domain} {p.key}" for p in to_apply if not write_preference(ctx, p)]
    applied = len(to_apply) - len(failures)
    if failures:
        result.add(
            Receipt.failure(
                step=STEP,
                action="defaults",
                error=f"{len(failures)} of {len(to_apply)} preference writes failed",
                metadata={"failed": failures, "applied": applied},
            )
        )
    else:
        result.add(
            Receipt.success(
                step=STEP,
                action="defaults",
                output=f"macOS defaults configured ({applied} settings)",
                metadata={"applied": applied},
            )
        )

    script = ctx.work_path(settings.script)
    if script.is_file():
        logger.info("Running %s", script)
        run = ctx.run("bash", str(script), interactive=True)
        if run.ok:
            result.add(Receipt.success(step=STEP, action="script", output=f"{script.name} completed"))
        else:
            result.add(
                Receipt.failure(
                    step=STEP,
                    action="script",
                    error=f"{script.name} exited with code {run.returncode}",
                    metadata={"returncode": run.returncode},
                )
            )
    return result


def restart_apps(ctx: RunContext, step: str) -> Receipt:
    """Restart the apps that cache preferences. Not running is fine."""
    apps = ctx.config.preferences.restart_apps
    if not apps:
        return Receipt.skip(step=step, action="restart-apps", reason="No applications to restart")
    restarted = [app for app in apps if ctx.run("killall", app).ok]
    return Receipt.success(
        step=step,
        action="restart-apps",
        output=f"Restarted {', '.join(restarted)}" if restarted else "No affected applications running",
        metadata={"restarted": restarted},
    )
