"""Standalone installer files shipped inside every pack.

The scripts only rely on a sibling "payload" folder and an optional
"manifest.json" next to them, so a pack can be installed without this tool.
"""

from pathlib import Path

INSTALLER_PS1 = "Install-UI-Pack.ps1"
INSTALLER_CMD = "Install-UI-Pack.cmd"
README_TXT = "README.txt"

_PS1_TEMPLATE = r"""# Installs the UI pack "{name}" v{version}
param(
    [Parameter(Mandatory = $true)][string]$WowRoot,
    [string]$TargetAccount,
    [string]$TargetRealm,
    [string]$TargetCharacter,
    [switch]$SkipBackup
)
$ErrorActionPreference = 'Stop'

$here = Split-Path -Parent $MyInvocation.MyCommand.Path
$payload = Join-Path $here 'payload'
if (-not (Test-Path $payload)) {{ throw "Invalid pack: payload folder not found next to the installer." }}
if (-not (Test-Path $WowRoot)) {{ throw "WoW folder not found: $WowRoot" }}
if (Get-Process -Name {process_list} -ErrorAction SilentlyContinue) {{
    throw 'The game is running. Close it and try again.'
}}

$manifest = $null
$manifestPath = Join-Path $here 'manifest.json'
if (Test-Path $manifestPath) {{
    try {{ $manifest = Get-Content $manifestPath -Raw | ConvertFrom-Json }} catch {{ $manifest = $null }}
}}

if (-not $SkipBackup) {{
    $backup = Join-Path $WowRoot ('_UIBackup_' + (Get-Date -Format 'yyyyMMdd-HHmmss'))
    New-Item -ItemType Directory -Path $backup | Out-Null
    foreach ($sub in 'Interface', 'WTF') {{
        $src = Join-Path $WowRoot $sub
        if ((Test-Path (Join-Path $payload $sub)) -and (Test-Path $src)) {{
            Copy-Item $src -Destination $backup -Recurse -Force
        }}
    }}
    Write-Host "Backup created: $backup"
}}

$srcInterface = Join-Path $payload 'Interface'
if (Test-Path $srcInterface) {{
    Copy-Item (Join-Path $srcInterface '*') -Destination (Join-Path $WowRoot 'Interface') -Recurse -Force
}}

$srcWtf = Join-Path $payload 'WTF'
if (Test-Path $srcWtf) {{
    $dstWtf = Join-Path $WowRoot 'WTF'
    New-Item -ItemType Directory -Path $dstWtf -Force | Out-Null
    Get-ChildItem $srcWtf | Where-Object {{ $_.Name -notin 'Account', 'CharacterTemplate' }} |
        ForEach-Object {{ Copy-Item $_.FullName -Destination $dstWtf -Recurse -Force }}

    $accountRoot = Join-Path $dstWtf 'Account'
    if (-not $TargetAccount) {{
        $existing = @(Get-ChildItem $accountRoot -Directory -ErrorAction SilentlyContinue)
        if ($existing.Count -eq 1) {{ $TargetAccount = $existing[0].Name }}
        else {{ $TargetAccount = Read-Host 'Destination account folder name' }}
    }}
    $dstAccount = Join-Path $accountRoot $TargetAccount

    $srcAccounts = Join-Path $srcWtf 'Account'
    if (Test-Path $srcAccounts) {{
        New-Item -ItemType Directory -Path $dstAccount -Force | Out-Null
        Get-ChildItem $srcAccounts -Directory | ForEach-Object {{
            Copy-Item (Join-Path $_.FullName '*') -Destination $dstAccount -Recurse -Force
        }}
    }}

    $template = Join-Path $srcWtf 'CharacterTemplate'
    if (Test-Path $template) {{
        $defRealm = ''; $defChar = ''
        if ($manifest -and $manifest.characterSource) {{
            $parts = $manifest.characterSource -split '\\'
            if ($parts.Count -ge 2) {{ $defRealm = $parts[-2]; $defChar = $parts[-1] }}
        }}
        if (-not $TargetRealm) {{ $TargetRealm = Read-Host "Target realm [$defRealm]"; if (-not $TargetRealm) {{ $TargetRealm = $defRealm }} }}
        if (-not $TargetCharacter) {{ $TargetCharacter = Read-Host "Target character [$defChar]"; if (-not $TargetCharacter) {{ $TargetCharacter = $defChar }} }}
        $dstChar = Join-Path (Join-Path $dstAccount $TargetRealm) $TargetCharacter
        New-Item -ItemType Directory -Path $dstChar -Force | Out-Null
        Copy-Item (Join-Path $template '*') -Destination $dstChar -Recurse -Force
    }}
}}
Write-Host 'UI pack installed.'
"""

_CMD_TEMPLATE = """@echo off
rem Launches the PowerShell installer that sits next to this file
powershell.exe -NoProfile -ExecutionPolicy Bypass -File "%~dp0{ps1}" %*
pause
"""

_README_TEMPLATE = """{name} v{version}
{underline}

Built for client version: {wow_version}
Addons: {addon_count}
Character template included: {template}

How to install
--------------
1. Close the game completely.
2. Extract this zip anywhere (keep the "payload" folder next to the installer).
3. Run {cmd}, or from PowerShell:
     .\\{ps1} -WowRoot "C:\\Program Files (x86)\\World of Warcraft\\_retail_"
4. Your current Interface and WTF folders are backed up to
   _UIBackup_<date>-<time> inside the game folder before anything is copied.

Optional installer parameters: -TargetAccount, -TargetRealm, -TargetCharacter, -SkipBackup
"""


def write_installer_assets(staging_root: Path, manifest, process_names) -> list[Path]:
    """Write the installer script, launcher and README into the staging root.

    Args:
        staging_root: Folder that also holds "payload" and "manifest.json"
        manifest: The PackManifest of the pack
        process_names: Client executable names the script refuses to run beside

    Returns:
        Paths of the written files
    """
    process_list = ",".join(
        f"'{Path(name).stem}'" for name in sorted(process_names)
    )
    title = f"{manifest.name} v{manifest.version}"
    contents = {
        INSTALLER_PS1: _PS1_TEMPLATE.format(
            name=manifest.name, version=manifest.version, process_list=process_list
        ),
        INSTALLER_CMD: _CMD_TEMPLATE.format(ps1=INSTALLER_PS1),
        README_TXT: _README_TEMPLATE.format(
            name=manifest.name,
            version=manifest.version,
            underline="=" * len(title),
            wow_version=manifest.wow_version,
            addon_count=len(manifest.addons),
            template="yes" if manifest.has_character_template else "no",
            cmd=INSTALLER_CMD,
            ps1=INSTALLER_PS1,
        ),
    }

    written = []
    for filename, text in contents.items():
        path = staging_root / filename
        # CRLF: these files are opened with Windows tools
        path.write_text(text, encoding="utf-8", newline="\r\n")
        written.append(path)
    return written
