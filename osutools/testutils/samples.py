"""Small but complete files used across the tests"""

V14_BEATMAP = "\r\n".join(
    [
        "osu file format v14",
        "",
        "[General]",
        "AudioFilename: audio.mp3",
        "AudioLeadIn: 0",
        "PreviewTime: 46073",
        "Countdown: 0",
        "SampleSet: Soft",
        "StackLeniency: 0.7",
        "Mode: 0",
        "LetterboxInBreaks: 0",
        "WidescreenStoryboard: 1",
        "",
        "[Editor]",
        "Bookmarks: 1000,2000,3000",
        "DistanceSpacing: 1.2",
        "BeatDivisor: 4",
        "GridSize: 32",
        "TimelineZoom: 2.5",
        "",
        "[Metadata]",
        "Title:Test Song",
        "TitleUnicode:テストソング",
        "Artist:Someone",
        "ArtistUnicode:Someone",
        "Creator:Mapper",
        "Version:Hard",
        "Source:",
        "Tags:test sample  round-trip",
        "BeatmapID:123456",
        "BeatmapSetID:-1",
        "",
        "[Difficulty]",
        "HPDrainRate:5",
        "CircleSize:4",
        "OverallDifficulty:7",
        "ApproachRate:8.5",
        "SliderMultiplier:1.4",
        "SliderTickRate:1",
        "",
        "[Events]",
        "//Background and Video events",
        '0,0,"bg.jpg",0,0',
        "//Break Periods",
        "2,20000,25000",
        "//Storyboard Layer 0 (Background)",
        'Sprite,Foreground,Centre,"sb/star.png",320,240',
        " F,0,1000,2000,0,1",
        " L,1000,4",
        "  S,0,0,500,1,1.2",
        "  S,0,500,1000,1.2,1",
        " T,HitSoundClap,0,60000",
        "  C,0,0,100,255,255,255,255,0,0",
        "//Storyboard Sound Samples",
        "",
        "[TimingPoints]",
        "1000,333.333333333333,4,2,1,60,1,0",
        "2000,-50,4,2,1,60,0,1",
        "3000,-133.333333333333,4,2,0,50,0,0",
        "",
        "",
        "[Colours]",
        "Combo1 : 255,128,0",
        "Combo2 : 0,202,0",
        "SliderBorder : 255,255,255",
        "",
        "[HitObjects]",
        "256,192,1000,5,0,0:0:0:0:",
        "100,100,1500,2,2,B|200:200|250:200|250:200|300:150,2,150,2|0|0,0:0|0:0|1:2,0:0:0:0:",
        "300,100,2000,1,0",
        "256,192,3000,12,0,5000,0:0:0:0:",
        "",
    ]
)

MANIA_HOLDS = "\n".join(
    [
        "osu file format v14",
        "",
        "[General]",
        "Mode: 3",
        "",
        "[HitObjects]",
        "64,192,1000,128,0,1500:0:0:0:0:",
        "192,192,1200,128,2,1800:1:2:0:70:hold.wav",
        "320,192,1300,128,0,1400",
    ]
)

V3_BEATMAP = "\r\n".join(
    [
        "osu file format v3",
        "",
        "[General]",
        "AudioFilename: old.mp3",
        "AudioHash: 0123456789abcdef0123456789abcdef",
        "",
        "[Metadata]",
        "Title:Old Song",
        "",
        "[Difficulty]",
        "HPDrainRate:3",
        "CircleSize:4",
        "OverallDifficulty:3",
        "SliderMultiplier: 1",
        "",
        "[Events]",
        "2,5000,9000",
        "",
        "[TimingPoints]",
        "500,400",
        "",
        "[HitObjects]",
        "64,64,500,1,0",
        "128,64,900,2,0,L|256:64,1,140",
        "",
    ]
)

STORYBOARD = "\r\n".join(
    [
        "[Variables]",
        "$pos=320,240",
        "$fade=F,0",
        "",
        "[Events]",
        "//Background and Video events",
        "//Storyboard Layer 0 (Background)",
        'Sprite,Background,TopLeft,"sb/bg.png",0,0',
        " F,0,0,1000,0,1",
        "//Storyboard Layer 3 (Foreground)",
        'Sprite,Foreground,Centre,"sb/dot.png",$pos',
        " $fade,100,200,1,0",
        " M,0,0,,320,240",
        'Animation,Pass,Centre,"sb/cat.png",320,240,4,100,LoopOnce',
        "_S,0,0,1000,0.5",
        "//Storyboard Sound Samples",
        'Sample,1000,0,"sb/drum.wav",80',
        "",
    ]
)
