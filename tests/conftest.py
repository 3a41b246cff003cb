"""
Shared fixtures: a small but realistic Live Set document.
"""

import gzip
import textwrap

import pytest


LIVE_SET_XML = textwrap.dedent('''\
    <?xml version="1.0" encoding="UTF-8"?>
    <Ableton MajorVersion="5" MinorVersion="11.0_433" Creator="Ableton Live 11.3.4" Revision="">
    \t<LiveSet>
    \t\t<NextPointeeId Value="24" />
    \t\t<Tracks>
    \t\t\t<AudioTrack Id="8">
    \t\t\t\t<Name>
    \t\t\t\t\t<EffectiveName Value="Drums" />
    \t\t\t\t</Name>
    \t\t\t\t<DeviceChain>
    \t\t\t\t\t<Devices>
    \t\t\t\t\t\t<Compressor2 Id="0">
    \t\t\t\t\t\t\t<On>
    \t\t\t\t\t\t\t\t<Manual Value="true" />
    \t\t\t\t\t\t\t</On>
    \t\t\t\t\t\t\t<SideChain>
    \t\t\t\t\t\t\t\t<OnOff>
    \t\t\t\t\t\t\t\t\t<Manual Value="false" />
    \t\t\t\t\t\t\t\t</OnOff>
    \t\t\t\t\t\t\t\t<RoutedInput>
    \t\t\t\t\t\t\t\t\t<Routable>
    \t\t\t\t\t\t\t\t\t\t<Target Value="AudioIn/None" />
    \t\t\t\t\t\t\t\t\t</Routable>
    \t\t\t\t\t\t\t\t</RoutedInput>
    \t\t\t\t\t\t\t</SideChain>
    \t\t\t\t\t\t</Compressor2>
    \t\t\t\t\t\t<PluginDevice Id="1">
    \t\t\t\t\t\t\t<PluginDesc>
    \t\t\t\t\t\t\t\t<VstPluginInfo Id="0">
    \t\t\t\t\t\t\t\t\t<Path Value="C:/VstPlugins/ValhallaRoom.dll" />
    \t\t\t\t\t\t\t\t\t<PlugName Value="ValhallaRoom" />
    \t\t\t\t\t\t\t\t\t<Preset>
    \t\t\t\t\t\t\t\t\t\t<VstPreset Id="2">
    \t\t\t\t\t\t\t\t\t\t\t<ParameterSettings />
    \t\t\t\t\t\t\t\t\t\t</VstPreset>
    \t\t\t\t\t\t\t\t\t</Preset>
    \t\t\t\t\t\t\t\t</VstPluginInfo>
    \t\t\t\t\t\t\t</PluginDesc>
    \t\t\t\t\t\t</PluginDevice>
    \t\t\t\t\t\t<PluginDevice Id="3">
    \t\t\t\t\t\t\t<PluginDesc>
    \t\t\t\t\t\t\t\t<Vst3PluginInfo Id="0">
    \t\t\t\t\t\t\t\t\t<DeviceType Value="1" />
    \t\t\t\t\t\t\t\t\t<Name Value="Pro-Q 3" />
    \t\t\t\t\t\t\t\t</Vst3PluginInfo>
    \t\t\t\t\t\t\t</PluginDesc>
    \t\t\t\t\t\t</PluginDevice>
    \t\t\t\t\t</Devices>
    \t\t\t\t</DeviceChain>
    \t\t\t</AudioTrack>
    \t\t\t<MidiTrack Id="9">
    \t\t\t\t<Name>
    \t\t\t\t\t<EffectiveName Value="Lead &amp; Pad" />
    \t\t\t\t</Name>
    \t\t\t\t<DeviceChain>
    \t\t\t\t\t<Devices>
    \t\t\t\t\t\t<PluginDevice Id="4">
    \t\t\t\t\t\t\t<PluginDesc>
    \t\t\t\t\t\t\t\t<VstPluginInfo Id="0">
    \t\t\t\t\t\t\t\t\t<Path Value="C:/VstPlugins/Serum_x64.dll" />
    \t\t\t\t\t\t\t\t\t<PlugName Value="Serum_x64" />
    \t\t\t\t\t\t\t\t</VstPluginInfo>
    \t\t\t\t\t\t\t</PluginDesc>
    \t\t\t\t\t\t\t<Buffer>
    \t\t\t\t\t\t\t\t<Data>0A1B2C3D</Data>
    \t\t\t\t\t\t\t</Buffer>
    \t\t\t\t\t\t</PluginDevice>
    \t\t\t\t\t</Devices>
    \t\t\t\t</DeviceChain>
    \t\t\t</MidiTrack>
    \t\t</Tracks>
    \t</LiveSet>
    </Ableton>
''')


@pytest.fixture
def live_set() -> bytes:
    """Decompressed Live Set XML."""
    return LIVE_SET_XML.encode('utf-8')


@pytest.fixture
def als_file(tmp_path, live_set):
    """The Live Set written as a gzipped .als file."""
    path = tmp_path / "My Song.als"
    path.write_bytes(gzip.compress(live_set))
    return path
